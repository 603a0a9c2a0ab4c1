"""Shared fixtures and factory functions for simulator tests."""

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from catalyst_sim.config import SimulationConfig
from catalyst_sim.pricing.models import CatalystContext, OptionGreeks, OptionType, RiskTier
from catalyst_sim.trading.ledger import Ledger
from catalyst_sim.trading.models import LegSide, OptionLeg, OptionPosition, StrategyType

AS_OF = date(2026, 10, 19)
EVENT_DATE = date(2026, 11, 20)
FIXED_NOW = datetime(2026, 10, 19, 10, 30)


# ─── Configuration Fixtures ─────────────────────────────────────────


@pytest.fixture
def config():
    """Default account: $100k, 5-point move alerts, $1,000 P&L steps."""
    return SimulationConfig(starting_balance=100_000)


@pytest.fixture
def sink():
    """Notification sink that records calls."""
    return MagicMock()


@pytest.fixture
def ledger(config, sink):
    """Fresh ledger with a fixed clock."""
    return Ledger(config=config, notifier=sink, clock=lambda: FIXED_NOW)


@pytest.fixture
def catalyst():
    return make_catalyst()


# ─── Factory Functions ──────────────────────────────────────────────


def make_catalyst(**overrides) -> CatalystContext:
    """Factory for CatalystContext with sensible defaults."""
    defaults = dict(
        ticker="ABCD",
        event_date=EVENT_DATE,
        tier=RiskTier.TIER_2,
        approval_probability=0.65,
        catalyst_id="cat-abcd-pdufa",
    )
    defaults.update(overrides)
    return CatalystContext(**defaults)


def make_leg(**overrides) -> OptionLeg:
    """Factory for a long ATM call leg."""
    defaults = dict(
        option_type=OptionType.CALL,
        strike=12.0,
        expiration=EVENT_DATE,
        side=LegSide.LONG,
        contracts=1,
        premium_per_contract=1.50,
        current_premium=1.50,
        greeks=OptionGreeks(delta=0.55, gamma=0.09, theta=-0.02, vega=0.015),
    )
    defaults.update(overrides)
    return OptionLeg(**defaults)


def make_option_position(legs=None, **overrides) -> OptionPosition:
    """Factory for a 2-contract long straddle costing $550."""
    if legs is None:
        legs = [
            make_leg(contracts=2, premium_per_contract=1.50, current_premium=1.50),
            make_leg(option_type=OptionType.PUT, contracts=2, premium_per_contract=1.25,
                     current_premium=1.25, greeks=OptionGreeks(delta=-0.45, gamma=0.09)),
        ]
    defaults = dict(
        id="opt-straddle-1",
        ticker="ABCD",
        strategy=StrategyType.STRADDLE,
        legs=legs,
        total_cost=550.0,
        current_value=550.0,
        unrealized_pnl=0.0,
        catalyst_id="cat-abcd-pdufa",
    )
    defaults.update(overrides)
    return OptionPosition(**defaults)
