"""Synthetic implied volatility from catalyst context, plus historical volatility."""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from catalyst_sim.dates import days_until
from catalyst_sim.pricing.models import CatalystContext, RiskTier

TRADING_DAYS_PER_YEAR = 252
DEFAULT_HISTORICAL_VOL = 0.50


@dataclass(frozen=True)
class VolatilityParams:
    """
    Empirical constants for the catalyst IV model. Configuration data,
    not calibrated market estimates.
    """

    base_iv: float = 0.50
    tier_offsets: Dict[RiskTier, float] = field(default_factory=lambda: {
        RiskTier.TIER_1: -0.08,
        RiskTier.TIER_2: -0.03,
        RiskTier.TIER_3: 0.05,
        RiskTier.TIER_4: 0.15,
    })
    # (max days until event, multiplier), checked in order
    proximity_steps: Tuple[Tuple[int, float], ...] = (
        (3, 2.0),
        (7, 1.7),
        (14, 1.4),
        (30, 1.2),
        (45, 1.1),
    )
    certainty_dampening: float = 0.2
    min_iv: float = 0.15
    max_iv: float = 2.0

    def proximity_multiplier(self, days: int) -> float:
        for max_days, multiplier in self.proximity_steps:
            if days <= max_days:
                return multiplier
        return 1.0


DEFAULT_VOLATILITY_PARAMS = VolatilityParams()


def derive_iv(
    tier: RiskTier,
    probability: float,
    days_until_event: int,
    params: VolatilityParams = DEFAULT_VOLATILITY_PARAMS,
) -> float:
    """
    Implied volatility for a stock ahead of a binary catalyst.

    Starts from the base IV, shifts by tier, scales up as the event nears,
    then damps as the approval probability moves away from a coin flip.
    Result is clamped to [min_iv, max_iv].
    """
    iv = params.base_iv + params.tier_offsets.get(RiskTier.parse(tier), 0.0)
    iv *= params.proximity_multiplier(days_until_event)
    iv *= 1 - params.certainty_dampening * abs(probability - 0.5)
    return min(max(iv, params.min_iv), params.max_iv)


def derive_iv_for(
    catalyst: CatalystContext,
    as_of: Optional[date] = None,
    params: VolatilityParams = DEFAULT_VOLATILITY_PARAMS,
) -> float:
    """derive_iv() from a catalyst record."""
    return derive_iv(
        catalyst.tier,
        catalyst.approval_probability,
        days_until(catalyst.event_date, as_of),
        params,
    )


def historical_volatility(prices: Union[Sequence[float], pd.Series]) -> float:
    """
    Annualized close-to-close volatility.

    Population stdev of consecutive log returns scaled by sqrt(252).
    Non-positive and non-finite prices are dropped first; fewer than two
    usable points returns DEFAULT_HISTORICAL_VOL.
    """
    values = pd.Series(prices, dtype=float).to_numpy()
    values = values[np.isfinite(values) & (values > 0)]
    if len(values) < 2:
        return DEFAULT_HISTORICAL_VOL

    log_returns = np.diff(np.log(values))
    return float(np.std(log_returns) * np.sqrt(TRADING_DAYS_PER_YEAR))
