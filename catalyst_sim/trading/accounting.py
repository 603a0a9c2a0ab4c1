"""Pure cost-basis and P&L helpers used by the ledger.

Each function returns new values and leaves its inputs untouched.
"""

from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Tuple

from catalyst_sim.trading.models import OptionLeg, Position

CONTRACT_MULTIPLIER = 100


def pnl_pct(pnl: float, cost_basis: float) -> float:
    """P&L as a percentage of cost basis; 0 for a zero or negative basis."""
    return (pnl / cost_basis) * 100 if cost_basis > 0 else 0.0


def mark_position(position: Position, price: float, now: datetime) -> Position:
    """Re-mark a stock position at ``price``."""
    current_value = position.quantity * price
    unrealized = current_value - position.total_cost
    return replace(
        position,
        current_price=price,
        current_value=current_value,
        unrealized_pnl=unrealized,
        unrealized_pnl_pct=pnl_pct(unrealized, position.total_cost),
        last_updated=now,
    )


def apply_buy(
    existing: Optional[Position],
    ticker: str,
    quantity: int,
    price: float,
    now: datetime,
    catalyst_id: Optional[str] = None,
) -> Position:
    """
    Position after buying ``quantity`` at ``price``.

    Average entry becomes (old total cost + new cost) / (old qty + qty).
    The whole position is re-marked at the trade price.
    """
    cost = quantity * price
    if existing is None:
        return Position(
            ticker=ticker,
            quantity=quantity,
            average_entry_price=price,
            current_price=price,
            total_cost=cost,
            current_value=cost,
            unrealized_pnl=0.0,
            unrealized_pnl_pct=0.0,
            opened_at=now,
            last_updated=now,
            catalyst_id=catalyst_id,
        )

    new_qty = existing.quantity + quantity
    new_cost = existing.total_cost + cost
    grown = replace(
        existing,
        quantity=new_qty,
        total_cost=new_cost,
        average_entry_price=new_cost / new_qty,
        catalyst_id=existing.catalyst_id or catalyst_id,
    )
    return mark_position(grown, price, now)


def realized_pnl(quantity: int, price: float, average_entry_price: float) -> Tuple[float, float]:
    """(pnl, pnl_pct) for selling ``quantity`` shares at ``price``."""
    cost_basis = quantity * average_entry_price
    pnl = quantity * (price - average_entry_price)
    return pnl, pnl_pct(pnl, cost_basis)


def apply_sell(position: Position, quantity: int, price: float, now: datetime) -> Optional[Position]:
    """
    Position after selling ``quantity`` at ``price``, or None once flat.

    Cost is reduced proportionally; the average entry price is unchanged.
    """
    remaining = position.quantity - quantity
    if remaining <= 0:
        return None
    reduced = replace(
        position,
        quantity=remaining,
        total_cost=remaining * position.average_entry_price,
    )
    return mark_position(reduced, price, now)


# ── Options ─────────────────────────────────────────────────────


def leg_value(leg: OptionLeg, premium: float, multiplier: int = CONTRACT_MULTIPLIER) -> float:
    """Signed dollar value of one leg at a per-share premium."""
    return leg.side.sign * premium * leg.contracts * multiplier


def net_option_cost(legs: Iterable[OptionLeg], multiplier: int = CONTRACT_MULTIPLIER) -> float:
    """Long premiums minus short premiums at entry. Negative for a net credit."""
    return sum(leg_value(leg, leg.premium_per_contract, multiplier) for leg in legs)


def net_option_value(legs: Iterable[OptionLeg], multiplier: int = CONTRACT_MULTIPLIER) -> float:
    """Signed value of all legs at their current premiums."""
    return sum(leg_value(leg, leg.current_premium, multiplier) for leg in legs)
