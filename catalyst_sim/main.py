"""CLI entry point.

Usage:
    python -m catalyst_sim.main chain --ticker ABCD --spot 12.40 --event-date 2026-11-20 --tier 2 --prob 0.65
    python -m catalyst_sim.main returns --tier 3 --prob 0.40
    python -m catalyst_sim.main iv --premium 1.85 --spot 12.40 --strike 12.5 --dte 30 --type CALL
    python -m catalyst_sim.main portfolio
    python -m catalyst_sim.main --dry-run       # prints config and exits

Environment variables:
    STARTING_BALANCE        Paper account starting cash (default: 100000)
    RISK_FREE_RATE          Rate used for pricing (default: 0.05)
    PRICE_ALERT_MOVE_PCT    Position P&L% move that triggers an alert (default: 5)
    PNL_ALERT_STEP          Aggregate P&L alert spacing in dollars (default: 1000)
    STORAGE_BACKEND         "local" or "gcs" (default: local)
    GCS_BUCKET_NAME         GCS bucket name (required if storage_backend=gcs)
    GCS_PREFIX              GCS path prefix
    LEDGER_STATE_PATH       Ledger snapshot path (default: ledger_state.json)
"""

import argparse
import logging
import os
import sys
from datetime import date
from typing import List, Optional

from catalyst_sim.config import SimulationConfig
from catalyst_sim.dates import market_today
from catalyst_sim.pricing.chain import generate_options_chain
from catalyst_sim.pricing.greeks import GreeksCalculator
from catalyst_sim.pricing.models import CatalystContext, OptionType, RiskTier
from catalyst_sim.pricing.volatility import derive_iv_for
from catalyst_sim.signals.returns import format_interval, get_interval_returns, get_optimal_entry
from catalyst_sim.storage import build_snapshot_backend
from catalyst_sim.trading.store import LedgerStore


def _env_float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def build_config() -> SimulationConfig:
    """Build SimulationConfig from environment variables.

    Only overrides SimulationConfig defaults when the env var is explicitly set.
    """
    overrides = {}

    if os.getenv("STARTING_BALANCE"):
        overrides["starting_balance"] = _env_float("STARTING_BALANCE", 100_000)
    if os.getenv("RISK_FREE_RATE"):
        overrides["risk_free_rate"] = _env_float("RISK_FREE_RATE", 0.05)
    if os.getenv("PRICE_ALERT_MOVE_PCT"):
        overrides["price_alert_move_pct"] = _env_float("PRICE_ALERT_MOVE_PCT", 5.0)
    if os.getenv("PNL_ALERT_STEP"):
        overrides["pnl_alert_step"] = _env_float("PNL_ALERT_STEP", 1_000)
    if os.getenv("STORAGE_BACKEND"):
        overrides["storage_backend"] = os.getenv("STORAGE_BACKEND")
    if os.getenv("GCS_BUCKET_NAME"):
        overrides["gcs_bucket_name"] = os.getenv("GCS_BUCKET_NAME")
    if os.getenv("GCS_PREFIX"):
        overrides["gcs_prefix"] = os.getenv("GCS_PREFIX")
    if os.getenv("LEDGER_STATE_PATH"):
        overrides["state_path"] = os.getenv("LEDGER_STATE_PATH")

    return SimulationConfig(**overrides)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalyst_sim", description="Catalyst options simulator")
    parser.add_argument("--dry-run", action="store_true", help="print config and exit")
    sub = parser.add_subparsers(dest="command")

    chain = sub.add_parser("chain", help="generate a synthetic options chain")
    chain.add_argument("--ticker", required=True)
    chain.add_argument("--spot", type=float, required=True)
    chain.add_argument("--event-date", type=date.fromisoformat, required=True)
    chain.add_argument("--tier", default="TIER_4")
    chain.add_argument("--prob", type=float, default=0.5)
    chain.add_argument("--as-of", type=date.fromisoformat, default=None)

    returns = sub.add_parser("returns", help="expected returns by interval")
    returns.add_argument("--tier", default="TIER_4")
    returns.add_argument("--prob", type=float, default=0.5)

    iv = sub.add_parser("iv", help="implied volatility from a quoted premium")
    iv.add_argument("--premium", type=float, required=True)
    iv.add_argument("--spot", type=float, required=True)
    iv.add_argument("--strike", type=float, required=True)
    iv.add_argument("--dte", type=int, required=True)
    iv.add_argument("--type", choices=["CALL", "PUT"], default="CALL")

    sub.add_parser("portfolio", help="show metrics for the saved paper account")
    return parser


def print_chain(args, config: SimulationConfig) -> None:
    catalyst = CatalystContext(
        ticker=args.ticker.upper(),
        event_date=args.event_date,
        tier=RiskTier.parse(args.tier),
        approval_probability=args.prob,
    )
    as_of = args.as_of or market_today()
    chain = generate_options_chain(
        catalyst.ticker, args.spot, catalyst, as_of=as_of, risk_free_rate=config.risk_free_rate,
    )
    iv = derive_iv_for(catalyst, as_of)

    print(f"{chain.ticker} @ ${chain.spot:,.2f}  exp {chain.expiration}  IV {iv:.1%}")
    print(f"{'strike':>8} {'call':>8} {'c.delta':>8} {'put':>8} {'p.delta':>8}")
    for call, put in zip(chain.calls, chain.puts):
        print(f"{call.strike:>8.2f} {call.premium:>8.2f} {call.greeks.delta:>8.3f} "
              f"{put.premium:>8.2f} {put.greeks.delta:>8.3f}")


def print_returns(args) -> None:
    tier = RiskTier.parse(args.tier)
    print(f"{tier.name}  p={args.prob:.2f}")
    for r in get_interval_returns(tier, args.prob):
        print(f"  {format_interval(r.interval):>16}: {r.expected_return_pct:+6.1f}% "
              f"(median {r.median_return_pct:+.1f}%, sd {r.std_deviation:.1f}, "
              f"p10 {r.p10:+.1f}, p90 {r.p90:+.1f})")
    print(f"  Optimal entry: {get_optimal_entry(tier, args.prob)}")


def print_iv(args, config: SimulationConfig) -> None:
    calc = GreeksCalculator(risk_free_rate=config.risk_free_rate)
    result = calc.compute_greeks_from_price(
        args.premium, args.spot, args.strike, args.dte, OptionType(args.type),
    )
    if result["iv"] is None:
        print("Could not solve implied volatility for that premium.")
        return
    print(f"IV {result['iv']:.2%}  delta {result['delta']:.3f}  gamma {result['gamma']:.4f}  "
          f"theta {result['theta']:.3f}/day  vega {result['vega']:.3f}")


def print_portfolio(config: SimulationConfig) -> None:
    store = LedgerStore(
        backend=build_snapshot_backend(config), key=os.path.basename(config.state_path),
    )
    ledger = store.load_or_create(config=config)
    m = ledger.get_metrics()
    print(f"  Total value:   ${m.total_value:,.2f}  ({m.total_gain:+,.2f}, {m.total_gain_pct:+.2f}%)")
    print(f"  Cash:          ${m.cash_balance:,.2f}")
    print(f"  Stocks:        ${m.positions_value:,.2f}")
    print(f"  Options:       ${m.options_value:,.2f}")
    print(f"  Trades:        {m.total_trades}  win rate {m.win_rate:.0%}")
    print(f"  Largest win:   ${m.largest_win:,.2f}   largest loss ${m.largest_loss:,.2f}")


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    config = build_config()

    if args.dry_run or args.command is None:
        print("=" * 60)
        print("Catalyst options simulator")
        print("=" * 60)
        print(f"  Starting balance: ${config.starting_balance:,.0f}")
        print(f"  Risk-free rate:   {config.risk_free_rate:.2%}")
        print(f"  Storage backend:  {config.storage_backend}")
        if config.storage_backend == "gcs":
            print(f"  GCS bucket:       {config.gcs_bucket_name}")
            print(f"  GCS prefix:       {config.gcs_prefix}")
        print(f"  State path:       {config.state_path}")
        return 0

    if args.command == "chain":
        print_chain(args, config)
    elif args.command == "returns":
        print_returns(args)
    elif args.command == "iv":
        print_iv(args, config)
    elif args.command == "portfolio":
        print_portfolio(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
