"""Unit tests for order validation."""

import pytest

from catalyst_sim.trading.models import StrategyType, TradeSide
from catalyst_sim.trading.validation import validate_option_position, validate_order
from tests.conftest import make_leg, make_option_position


class TestValidateOrder:
    def test_valid_order(self):
        check = validate_order("ABCD", TradeSide.BUY, 100, 12.5)
        assert check.valid is True
        assert check.error is None

    @pytest.mark.parametrize("ticker", ["", "   ", None])
    def test_missing_ticker(self, ticker):
        assert validate_order(ticker, TradeSide.BUY, 1, 10.0).valid is False

    def test_unknown_side(self):
        check = validate_order("ABCD", "HOLD", 1, 10.0)
        assert check.valid is False
        assert "BUY or SELL" in check.error

    @pytest.mark.parametrize("quantity", [0, -5, 1.5, True, "10", None])
    def test_bad_quantity(self, quantity):
        check = validate_order("ABCD", TradeSide.BUY, quantity, 10.0)
        assert check.valid is False
        assert "Quantity" in check.error

    @pytest.mark.parametrize("price", [0, -1.0, float("nan"), float("inf"), "10", None])
    def test_bad_price(self, price):
        check = validate_order("ABCD", TradeSide.SELL, 10, price)
        assert check.valid is False
        assert "Price" in check.error

    def test_integer_price_accepted(self):
        assert validate_order("ABCD", TradeSide.BUY, 10, 12).valid is True


class TestValidateOptionPosition:
    def test_valid_straddle(self):
        assert validate_option_position(make_option_position()).valid is True

    def test_no_legs(self):
        check = validate_option_position(make_option_position(legs=[]))
        assert check.valid is False
        assert "leg" in check.error

    def test_missing_ticker(self):
        assert validate_option_position(make_option_position(ticker=" ")).valid is False

    def test_unknown_strategy(self):
        assert validate_option_position(make_option_position(strategy="BUTTERFLY")).valid is False

    def test_zero_contracts(self):
        pos = make_option_position(legs=[make_leg(contracts=0)])
        check = validate_option_position(pos)
        assert check.valid is False
        assert "Leg 0" in check.error

    def test_bad_side(self):
        pos = make_option_position(legs=[make_leg(side="LONG")])
        assert validate_option_position(pos).valid is False

    def test_negative_strike(self):
        pos = make_option_position(legs=[make_leg(), make_leg(strike=-5.0)])
        check = validate_option_position(pos)
        assert check.valid is False
        assert "Leg 1" in check.error

    def test_negative_premium(self):
        pos = make_option_position(legs=[make_leg(premium_per_contract=-0.5)])
        assert validate_option_position(pos).valid is False

    def test_non_finite_cost(self):
        assert validate_option_position(make_option_position(total_cost=float("nan"))).valid is False

    def test_credit_cost_allowed(self):
        pos = make_option_position(strategy=StrategyType.IRON_CONDOR, total_cost=-120.0)
        assert validate_option_position(pos).valid is True
