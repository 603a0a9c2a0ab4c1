"""Unit tests for GreeksCalculator."""

import pytest

from catalyst_sim.pricing import black_scholes as bs
from catalyst_sim.pricing.greeks import GreeksCalculator
from catalyst_sim.pricing.models import OptionType


@pytest.fixture
def calc():
    return GreeksCalculator(risk_free_rate=0.05)


# ── compute_iv ──────────────────────────────────────────────────


class TestComputeIV:
    def test_recovers_call_vol(self, calc):
        premium = bs.call_price(50.0, 50.0, 30 / 365, 0.05, 0.60)
        iv = calc.compute_iv(premium, 50.0, 50.0, 30, OptionType.CALL)
        assert iv == pytest.approx(0.60, abs=1e-4)

    def test_recovers_put_vol(self, calc):
        premium = bs.put_price(12.0, 13.0, 45 / 365, 0.05, 0.85)
        iv = calc.compute_iv(premium, 12.0, 13.0, 45, OptionType.PUT)
        assert iv == pytest.approx(0.85, abs=1e-4)

    def test_default_type_is_call(self, calc):
        premium = bs.call_price(20.0, 22.0, 14 / 365, 0.05, 0.40)
        assert calc.compute_iv(premium, 20.0, 22.0, 14) == pytest.approx(0.40, abs=1e-4)

    def test_zero_price_returns_none(self, calc):
        assert calc.compute_iv(0.0, 50.0, 50.0, 30) is None

    def test_zero_dte_returns_none(self, calc):
        assert calc.compute_iv(1.60, 50.0, 50.0, 0) is None

    def test_negative_strike_returns_none(self, calc):
        assert calc.compute_iv(1.60, 50.0, -50.0, 30) is None

    def test_nan_price_returns_none(self, calc):
        assert calc.compute_iv(float("nan"), 50.0, 50.0, 30) is None

    def test_below_intrinsic_returns_none(self, calc):
        # call 20 points in the money quoted at 5
        assert calc.compute_iv(5.0, 70.0, 50.0, 30, OptionType.CALL) is None


# ── compute_greeks_from_price ───────────────────────────────────


class TestComputeGreeksFromPrice:
    def test_all_keys_present(self, calc):
        premium = bs.call_price(50.0, 50.0, 30 / 365, 0.05, 0.50)
        result = calc.compute_greeks_from_price(premium, 50.0, 50.0, 30, OptionType.CALL)
        assert set(result) == {"iv", "delta", "gamma", "theta", "vega"}
        assert result["iv"] == pytest.approx(0.50, abs=1e-4)
        assert 0 < result["delta"] < 1
        assert result["gamma"] > 0
        assert result["theta"] < 0

    def test_matches_direct_greeks(self, calc):
        premium = bs.put_price(50.0, 55.0, 30 / 365, 0.05, 0.70)
        result = calc.compute_greeks_from_price(premium, 50.0, 55.0, 30, OptionType.PUT)
        direct = bs.greeks(50.0, 55.0, 30 / 365, 0.05, 0.70, OptionType.PUT)
        assert result["delta"] == pytest.approx(direct.delta, abs=1e-4)
        assert result["vega"] == pytest.approx(direct.vega, abs=1e-4)

    def test_unsolvable_leaves_greeks_none(self, calc):
        result = calc.compute_greeks_from_price(0.0, 50.0, 50.0, 30)
        assert result == {"iv": None, "delta": None, "gamma": None, "theta": None, "vega": None}
