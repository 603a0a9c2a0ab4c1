"""Implied volatility and Greeks from a quoted premium, via py_vollib."""

from typing import Dict, Optional

import numpy as np
from py_vollib.black_scholes.implied_volatility import implied_volatility

from catalyst_sim.pricing import black_scholes as bs
from catalyst_sim.pricing.models import OptionType


class GreeksCalculator:
    """
    Backs out implied volatility from an observed option premium and
    recomputes Greeks at that volatility. Used to mark legs whose premium
    was quoted rather than generated from the catalyst IV model.
    """

    def __init__(self, risk_free_rate: float = 0.05):
        self.r = risk_free_rate

    def compute_iv(
        self,
        option_price: float,
        stock_price: float,
        strike: float,
        dte: int,
        option_type: OptionType = OptionType.CALL,
    ) -> Optional[float]:
        """Implied volatility for a premium. Returns None when it cannot be solved."""
        t = dte / 365.0

        if not all([
            np.isfinite(option_price),
            np.isfinite(stock_price),
            np.isfinite(strike),
            t > 0,
            option_price > 0,
            stock_price > 0,
            strike > 0,
        ]):
            return None

        try:
            iv = float(implied_volatility(option_price, stock_price, strike, t, self.r, option_type.flag))
        except Exception:
            # py_vollib raises for premiums below intrinsic or above the upper bound
            return None
        return iv if np.isfinite(iv) and iv > 0 else None

    def compute_greeks_from_price(
        self,
        option_price: float,
        stock_price: float,
        strike: float,
        dte: int,
        option_type: OptionType = OptionType.CALL,
    ) -> Dict[str, Optional[float]]:
        """IV plus delta/gamma/theta/vega in one call; Greeks are None when IV is."""
        iv = self.compute_iv(option_price, stock_price, strike, dte, option_type)
        result = {'iv': iv, 'delta': None, 'gamma': None, 'theta': None, 'vega': None}

        if iv:
            g = bs.greeks(stock_price, strike, dte / 365.0, self.r, iv, option_type)
            result.update(g.to_dict())

        return result
