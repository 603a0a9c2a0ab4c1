"""Unit tests for synthetic options chain generation."""

import json
from datetime import date

import pytest

from catalyst_sim.dates import days_until, to_date
from catalyst_sim.pricing import black_scholes as bs
from catalyst_sim.pricing.chain import (
    contract_id,
    find_atm_contract,
    find_nearest_strike,
    generate_options_chain,
    strike_increment,
    strike_ladder,
)
from catalyst_sim.pricing.models import OptionType, RiskTier
from catalyst_sim.pricing.volatility import derive_iv
from tests.conftest import AS_OF, EVENT_DATE, make_catalyst


@pytest.fixture
def chain(catalyst):
    return generate_options_chain("ABCD", 12.34, catalyst, as_of=AS_OF)


class TestStrikeIncrement:
    @pytest.mark.parametrize("spot,expected", [
        (3.0, 1.0), (19.99, 1.0),
        (20.0, 2.5), (49.99, 2.5),
        (50.0, 5.0), (480.0, 5.0),
    ])
    def test_brackets(self, spot, expected):
        assert strike_increment(spot) == expected


class TestStrikeLadder:
    def test_small_cap_ladder(self):
        assert strike_ladder(12.34) == [8.0, 9.0, 10.0, 11.0, 12.0, 13.0, 14.0, 15.0, 16.0, 17.0]

    def test_covers_thirty_percent_band(self):
        for spot in (7.77, 23.4, 41.0, 101.3, 256.0):
            strikes = strike_ladder(spot)
            assert strikes[0] <= spot * 0.7 or strikes[0] == 1.0
            assert strikes[-1] >= spot * 1.3

    def test_evenly_spaced(self):
        strikes = strike_ladder(37.5)
        gaps = {round(b - a, 2) for a, b in zip(strikes, strikes[1:])}
        assert gaps == {2.5}

    def test_floor_at_one_dollar(self):
        assert strike_ladder(1.2)[0] == 1.0


class TestGenerateOptionsChain:
    def test_call_and_put_per_strike(self, chain):
        assert [c.strike for c in chain.calls] == [p.strike for p in chain.puts]
        assert list(chain.strikes) == strike_ladder(12.34)
        assert all(c.option_type is OptionType.CALL for c in chain.calls)
        assert all(p.option_type is OptionType.PUT for p in chain.puts)

    def test_sorted_by_strike(self, chain):
        assert list(chain.strikes) == sorted(chain.strikes)

    def test_expires_on_event_date(self, chain):
        assert chain.expiration == EVENT_DATE
        assert all(c.expiration == EVENT_DATE for c in chain.calls + chain.puts)

    def test_uses_catalyst_iv(self, chain, catalyst):
        expected = derive_iv(catalyst.tier, catalyst.approval_probability, 32)
        assert all(c.implied_volatility == expected for c in chain.calls + chain.puts)

    def test_premiums_positive_and_in_cents(self, chain):
        for c in chain.calls + chain.puts:
            assert c.premium >= bs.MIN_TICK
            assert c.premium == round(c.premium, 2)

    def test_premium_shape(self, chain):
        call_premiums = [c.premium for c in chain.calls]
        put_premiums = [p.premium for p in chain.puts]
        assert call_premiums == sorted(call_premiums, reverse=True)
        assert put_premiums == sorted(put_premiums)

    def test_deterministic(self, catalyst):
        first = generate_options_chain("ABCD", 12.34, catalyst, as_of=AS_OF)
        second = generate_options_chain("ABCD", 12.34, catalyst, as_of=AS_OF)
        assert first == second
        assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())

    def test_minimum_one_day_after_event(self, catalyst):
        late = generate_options_chain("ABCD", 12.34, catalyst, as_of=date(2026, 12, 1))
        assert all(c.days_to_expiration == 1 for c in late.calls)
        assert all(c.premium >= bs.MIN_TICK for c in late.calls + late.puts)

    def test_contract_ids(self, chain):
        assert chain.calls[0].id == "ABCD-C-8-2026-11-20"
        assert contract_id("XYZ", OptionType.PUT, 12.5, EVENT_DATE) == "XYZ-P-12.5-2026-11-20"
        assert len({c.id for c in chain.calls + chain.puts}) == 2 * len(chain.strikes)

    def test_higher_risk_richer_premiums(self):
        safe = generate_options_chain("ABCD", 12.34, make_catalyst(tier=RiskTier.TIER_1), as_of=AS_OF)
        risky = generate_options_chain("ABCD", 12.34, make_catalyst(tier=RiskTier.TIER_4), as_of=AS_OF)
        atm_safe = find_atm_contract(safe.calls, 12.34)
        atm_risky = find_atm_contract(risky.calls, 12.34)
        assert atm_risky.premium > atm_safe.premium


class TestFindContracts:
    def test_atm_is_nearest_strike(self, chain):
        assert find_atm_contract(chain.calls, 12.34).strike == 12.0
        assert find_atm_contract(chain.puts, 12.70).strike == 13.0

    def test_tie_goes_to_lower_strike(self, chain):
        assert find_nearest_strike(chain.calls, 12.5).strike == 12.0

    def test_target_outside_ladder_snaps_to_edge(self, chain):
        assert find_nearest_strike(chain.calls, 40.0).strike == 17.0

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            find_nearest_strike([], 10.0)


class TestDates:
    def test_days_until(self):
        assert days_until(EVENT_DATE, AS_OF) == 32
        assert days_until("2026-10-18", AS_OF) == -1

    def test_to_date_accepts_timestamps(self):
        assert to_date("2026-11-20T16:00:00") == EVENT_DATE
