"""Option strategy templates and multi-leg position construction."""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Dict, Optional, Tuple

from catalyst_sim.dates import days_until
from catalyst_sim.pricing import black_scholes as bs
from catalyst_sim.pricing.chain import find_atm_contract, find_nearest_strike
from catalyst_sim.pricing.models import OptionsChain, OptionType
from catalyst_sim.trading.accounting import CONTRACT_MULTIPLIER, net_option_cost, net_option_value
from catalyst_sim.trading.models import LegSide, OptionLeg, OptionPosition, StrategyType


@dataclass(frozen=True)
class LegTemplate:
    """One leg of a strategy; strike_offset counts strikes away from ATM."""

    option_type: OptionType
    side: LegSide
    strike_offset: int = 0


@dataclass(frozen=True)
class StrategyTemplate:
    type: StrategyType
    label: str
    description: str
    legs: Tuple[LegTemplate, ...]
    max_loss: str
    max_gain: str


_C, _P = OptionType.CALL, OptionType.PUT
_L, _S = LegSide.LONG, LegSide.SHORT

STRATEGY_TEMPLATES: Dict[StrategyType, StrategyTemplate] = {
    t.type: t for t in (
        StrategyTemplate(
            StrategyType.CALL, "Buy Call",
            "Bullish bet on approval",
            (LegTemplate(_C, _L, 0),),
            "Premium paid", "Unlimited",
        ),
        StrategyTemplate(
            StrategyType.PUT, "Buy Put",
            "Bearish bet on rejection",
            (LegTemplate(_P, _L, 0),),
            "Premium paid", "Strike price - premium",
        ),
        StrategyTemplate(
            StrategyType.STRADDLE, "Straddle",
            "Big move in either direction: ATM call + ATM put",
            (LegTemplate(_C, _L, 0), LegTemplate(_P, _L, 0)),
            "Total premium paid", "Unlimited",
        ),
        StrategyTemplate(
            StrategyType.STRANGLE, "Strangle",
            "Cheaper than a straddle: OTM call + OTM put",
            (LegTemplate(_C, _L, 2), LegTemplate(_P, _L, -2)),
            "Total premium paid", "Unlimited",
        ),
        StrategyTemplate(
            StrategyType.IRON_CONDOR, "Iron Condor",
            "Credit play on a muted reaction: short OTM strangle, long wings",
            (
                LegTemplate(_P, _L, -3),
                LegTemplate(_P, _S, -1),
                LegTemplate(_C, _S, 1),
                LegTemplate(_C, _L, 3),
            ),
            "Wing width - net credit", "Net credit received",
        ),
        StrategyTemplate(
            StrategyType.BULL_CALL_SPREAD, "Bull Call Spread",
            "Capped-risk bullish play: buy lower call, sell higher call",
            (LegTemplate(_C, _L, 0), LegTemplate(_C, _S, 3)),
            "Net premium paid", "Strike difference - net premium",
        ),
        StrategyTemplate(
            StrategyType.BEAR_PUT_SPREAD, "Bear Put Spread",
            "Capped-risk bearish play: buy higher put, sell lower put",
            (LegTemplate(_P, _L, 0), LegTemplate(_P, _S, -3)),
            "Net premium paid", "Strike difference - net premium",
        ),
    )
}


def chain_increment(chain: OptionsChain) -> float:
    strikes = chain.strikes
    return abs(strikes[1] - strikes[0]) if len(strikes) > 1 else 2.5


def build_strategy_position(
    chain: OptionsChain,
    strategy: StrategyType,
    contracts: int = 1,
    position_id: str = "",
    catalyst_id: Optional[str] = None,
    opened_at: Optional[datetime] = None,
) -> OptionPosition:
    """
    Assemble a multi-leg position from a chain.

    Legs are placed at ATM plus each template offset (in strikes), snapped to
    the nearest listed strike. total_cost is the signed net premium with the
    100-share multiplier applied. An empty position_id lets the ledger assign one.

    Raises ValueError when the chain is too narrow for legs at different
    offsets to land on different strikes.
    """
    template = STRATEGY_TEMPLATES[strategy]
    atm = find_atm_contract(chain.calls, chain.spot)
    increment = chain_increment(chain)

    strike_at_offset: Dict[int, float] = {}
    legs = []
    for leg in template.legs:
        target = atm.strike + leg.strike_offset * increment
        contract = find_nearest_strike(chain.contracts(leg.option_type), target)
        strike_at_offset.setdefault(leg.strike_offset, contract.strike)
        legs.append(OptionLeg(
            option_type=leg.option_type,
            strike=contract.strike,
            expiration=contract.expiration,
            side=leg.side,
            contracts=contracts,
            premium_per_contract=contract.premium,
            current_premium=contract.premium,
            greeks=contract.greeks,
        ))

    distinct = len(set(strike_at_offset.values()))
    if distinct < len(strike_at_offset):
        raise ValueError(
            f"{template.label} needs {len(strike_at_offset)} distinct strikes; "
            f"{chain.ticker} chain at ${chain.spot:g} lists {len(chain.strikes)} "
            f"and the legs collapse onto {distinct}"
        )

    cost = net_option_cost(legs)
    return OptionPosition(
        id=position_id,
        ticker=chain.ticker,
        strategy=strategy,
        legs=legs,
        total_cost=cost,
        current_value=cost,
        unrealized_pnl=0.0,
        catalyst_id=catalyst_id,
        opened_at=opened_at,
    )


def mark_option_position(
    position: OptionPosition,
    spot: float,
    iv: float,
    as_of: Optional[date] = None,
    risk_free_rate: float = 0.05,
) -> OptionPosition:
    """
    Re-price every leg at ``spot`` and ``iv`` and return the re-marked copy.

    Days to expiry are measured from ``as_of``; expired legs settle at
    intrinsic value.
    """
    legs = []
    for leg in position.legs:
        T = max(days_until(leg.expiration, as_of), 0) / 365.0
        premium = bs.option_price(leg.option_type, spot, leg.strike, T, risk_free_rate, iv)
        legs.append(replace(
            leg,
            current_premium=round(premium, 2),
            greeks=bs.greeks(spot, leg.strike, T, risk_free_rate, iv, leg.option_type),
        ))

    value = net_option_value(legs, CONTRACT_MULTIPLIER)
    return replace(
        position,
        legs=legs,
        current_value=value,
        unrealized_pnl=value - position.total_cost,
    )
