"""Order validation - rejects malformed orders before any ledger mutation."""

import math
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, Optional

from catalyst_sim.trading.models import LegSide, OptionPosition, StrategyType, TradeSide


@dataclass
class OrderValidation:
    valid: bool
    error: Optional[str] = None


def is_finite_number(value: Any) -> bool:
    """Real and finite. Accepts numpy scalars; rejects bools, NaN and infinities."""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _is_positive_number(value: Any) -> bool:
    return is_finite_number(value) and value > 0


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool) and value > 0


def validate_order(ticker: str, side: Any, quantity: Any, price: Any) -> OrderValidation:
    """
    Validate a stock order: ticker present, known side, whole positive
    share count, positive finite price.
    """
    if not ticker or not str(ticker).strip():
        return OrderValidation(False, "Ticker is required")

    if not isinstance(side, TradeSide):
        return OrderValidation(False, "Side must be BUY or SELL")

    if not _is_positive_int(quantity):
        return OrderValidation(False, "Quantity must be a positive integer")

    if not _is_positive_number(price):
        return OrderValidation(False, "Price must be a positive number")

    return OrderValidation(True)


def validate_option_position(position: OptionPosition) -> OrderValidation:
    """
    Validate a multi-leg option order: at least one leg, positive contract
    counts and strikes, non-negative premiums, finite net cost.
    """
    if not position.ticker or not position.ticker.strip():
        return OrderValidation(False, "Ticker is required")

    if not isinstance(position.strategy, StrategyType):
        return OrderValidation(False, "Unknown strategy type")

    if not position.legs:
        return OrderValidation(False, "Option position needs at least one leg")

    for i, leg in enumerate(position.legs):
        if not isinstance(leg.side, LegSide):
            return OrderValidation(False, f"Leg {i}: side must be LONG or SHORT")
        if not _is_positive_int(leg.contracts):
            return OrderValidation(False, f"Leg {i}: contracts must be a positive integer")
        if not _is_positive_number(leg.strike):
            return OrderValidation(False, f"Leg {i}: strike must be a positive number")
        premium = leg.premium_per_contract
        if not isinstance(premium, Real) or not math.isfinite(premium) or premium < 0:
            return OrderValidation(False, f"Leg {i}: premium must be non-negative")

    if not isinstance(position.total_cost, Real) or not math.isfinite(position.total_cost):
        return OrderValidation(False, "Total cost must be a finite number")

    return OrderValidation(True)
