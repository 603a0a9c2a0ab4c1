"""Unit tests for strategy templates and multi-leg position construction."""

from datetime import date

import pytest

from catalyst_sim.pricing.chain import generate_options_chain
from catalyst_sim.pricing.models import OptionType
from catalyst_sim.pricing.strategies import (
    STRATEGY_TEMPLATES,
    build_strategy_position,
    chain_increment,
    mark_option_position,
)
from catalyst_sim.trading.models import LegSide, StrategyType
from tests.conftest import AS_OF


@pytest.fixture
def chain(catalyst):
    # ATM strike 12, $1 increments from 8 to 17
    return generate_options_chain("ABCD", 12.34, catalyst, as_of=AS_OF)


def _premium(chain, option_type, strike):
    return next(c.premium for c in chain.contracts(option_type) if c.strike == strike)


def _leg_summary(position):
    return [(leg.option_type, leg.side, leg.strike) for leg in position.legs]


class TestTemplates:
    def test_every_strategy_has_template(self):
        assert set(STRATEGY_TEMPLATES) == set(StrategyType)

    def test_iron_condor_is_four_legs(self):
        legs = STRATEGY_TEMPLATES[StrategyType.IRON_CONDOR].legs
        assert len(legs) == 4
        assert sum(1 for leg in legs if leg.side is LegSide.SHORT) == 2

    def test_chain_increment(self, chain):
        assert chain_increment(chain) == 1.0


class TestBuildStrategyPosition:
    def test_single_call(self, chain):
        pos = build_strategy_position(chain, StrategyType.CALL)
        assert _leg_summary(pos) == [(OptionType.CALL, LegSide.LONG, 12.0)]
        assert pos.total_cost == pytest.approx(_premium(chain, OptionType.CALL, 12.0) * 100)

    def test_straddle_cost(self, chain):
        pos = build_strategy_position(chain, StrategyType.STRADDLE, contracts=2)
        expected = (_premium(chain, OptionType.CALL, 12.0) + _premium(chain, OptionType.PUT, 12.0)) * 100 * 2
        assert pos.total_cost == pytest.approx(expected)
        assert pos.current_value == pos.total_cost
        assert pos.unrealized_pnl == 0.0
        assert pos.total_contracts == 4

    def test_strangle_strikes(self, chain):
        pos = build_strategy_position(chain, StrategyType.STRANGLE)
        assert _leg_summary(pos) == [
            (OptionType.CALL, LegSide.LONG, 14.0),
            (OptionType.PUT, LegSide.LONG, 10.0),
        ]

    def test_bull_call_spread_is_net_debit(self, chain):
        pos = build_strategy_position(chain, StrategyType.BULL_CALL_SPREAD)
        assert _leg_summary(pos) == [
            (OptionType.CALL, LegSide.LONG, 12.0),
            (OptionType.CALL, LegSide.SHORT, 15.0),
        ]
        expected = (_premium(chain, OptionType.CALL, 12.0) - _premium(chain, OptionType.CALL, 15.0)) * 100
        assert pos.total_cost == pytest.approx(expected)
        assert pos.total_cost > 0

    def test_bear_put_spread_is_net_debit(self, chain):
        pos = build_strategy_position(chain, StrategyType.BEAR_PUT_SPREAD)
        assert [leg.strike for leg in pos.legs] == [12.0, 9.0]
        assert pos.total_cost > 0

    def test_iron_condor_is_net_credit(self, chain):
        pos = build_strategy_position(chain, StrategyType.IRON_CONDOR)
        assert [leg.strike for leg in pos.legs] == [9.0, 11.0, 13.0, 15.0]
        assert pos.total_cost < 0

    def test_offsets_beyond_ladder_snap_to_edge(self, catalyst):
        narrow = generate_options_chain("ABCD", 2.0, catalyst, as_of=AS_OF)
        pos = build_strategy_position(narrow, StrategyType.BEAR_PUT_SPREAD)
        assert pos.legs[1].strike == narrow.strikes[0]

    def test_single_strike_chain_allows_atm_structures(self, catalyst):
        single = generate_options_chain("ABCD", 0.2, catalyst, as_of=AS_OF)
        assert single.strikes == (1.0,)
        assert [leg.strike for leg in build_strategy_position(single, StrategyType.STRADDLE).legs] == [1.0, 1.0]

    @pytest.mark.parametrize("strategy", [
        StrategyType.STRANGLE,
        StrategyType.IRON_CONDOR,
        StrategyType.BULL_CALL_SPREAD,
        StrategyType.BEAR_PUT_SPREAD,
    ])
    def test_single_strike_chain_rejects_spreads(self, catalyst, strategy):
        single = generate_options_chain("ABCD", 0.2, catalyst, as_of=AS_OF)
        with pytest.raises(ValueError, match="distinct strikes"):
            build_strategy_position(single, strategy)

    def test_collapsed_wing_rejected(self, catalyst):
        # strikes 1, 2, 3: both put offsets (-3, -1) snap to 1
        narrow = generate_options_chain("ABCD", 2.0, catalyst, as_of=AS_OF)
        with pytest.raises(ValueError, match="Iron Condor needs 4 distinct strikes"):
            build_strategy_position(narrow, StrategyType.IRON_CONDOR)

    def test_carries_ids(self, chain):
        pos = build_strategy_position(chain, StrategyType.PUT, position_id="opt-1", catalyst_id="cat-9")
        assert pos.id == "opt-1"
        assert pos.catalyst_id == "cat-9"
        assert pos.ticker == "ABCD"

    def test_legs_carry_greeks(self, chain):
        pos = build_strategy_position(chain, StrategyType.STRADDLE)
        assert pos.legs[0].greeks.delta > 0
        assert pos.legs[1].greeks.delta < 0


class TestMarkOptionPosition:
    def test_unchanged_market_no_pnl(self, chain):
        pos = build_strategy_position(chain, StrategyType.STRADDLE)
        iv = chain.calls[0].implied_volatility
        marked = mark_option_position(pos, 12.34, iv, as_of=AS_OF)
        assert marked.current_value == pytest.approx(pos.total_cost)
        assert marked.unrealized_pnl == pytest.approx(0.0, abs=1e-9)

    def test_rally_helps_long_call(self, chain):
        pos = build_strategy_position(chain, StrategyType.CALL)
        iv = chain.calls[0].implied_volatility
        marked = mark_option_position(pos, 15.0, iv, as_of=AS_OF)
        assert marked.unrealized_pnl > 0
        assert marked.legs[0].current_premium > pos.legs[0].premium_per_contract

    def test_original_untouched(self, chain):
        pos = build_strategy_position(chain, StrategyType.CALL)
        before = pos.legs[0].current_premium
        mark_option_position(pos, 15.0, 0.5, as_of=AS_OF)
        assert pos.legs[0].current_premium == before

    def test_expired_settles_at_intrinsic(self, chain):
        pos = build_strategy_position(chain, StrategyType.STRADDLE, contracts=3)
        marked = mark_option_position(pos, 20.0, 0.5, as_of=date(2026, 12, 1))
        # call 12 worth 8, put 12 worthless
        assert marked.current_value == pytest.approx(8.0 * 100 * 3)
        assert marked.legs[1].current_premium == 0.0
