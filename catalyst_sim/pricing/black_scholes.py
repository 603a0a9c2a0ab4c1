"""Black-Scholes pricing and Greeks for synthetic catalyst options.

Closed-form values come from py_vollib. Expired options and zero-volatility
inputs are resolved here to their limiting values so callers never see an
exception, a NaN, or a negative price.

Conventions:
    S  spot price (> 0)
    K  strike (> 0)
    T  time to expiry in years
    r  continuously compounded risk-free rate
    sigma  annualized volatility (0.50 = 50%)
"""

import math
from typing import Tuple

from py_vollib.black_scholes import black_scholes
from py_vollib.black_scholes.greeks.analytical import (
    delta as bs_delta,
    gamma as bs_gamma,
    theta as bs_theta,
    vega as bs_vega,
)
from scipy.stats import norm

from catalyst_sim.pricing.models import OptionGreeks, OptionType

MIN_TICK = 0.01


def _is_degenerate(T: float, sigma: float) -> bool:
    return T <= 0 or sigma <= 0


def norm_cdf(x: float) -> float:
    """Standard normal CDF."""
    return float(norm.cdf(x))


def norm_pdf(x: float) -> float:
    return float(norm.pdf(x))


def d1_d2(S: float, K: float, T: float, r: float, sigma: float) -> Tuple[float, float]:
    """Black-Scholes d1 and d2. Requires T > 0 and sigma > 0."""
    vol_sqrt_t = sigma * math.sqrt(T)
    d1 = (math.log(S / K) + (r + 0.5 * sigma * sigma) * T) / vol_sqrt_t
    return d1, d1 - vol_sqrt_t


def intrinsic_value(S: float, K: float, option_type: OptionType) -> float:
    """Exercise value today."""
    if option_type is OptionType.CALL:
        return max(S - K, 0.0)
    return max(K - S, 0.0)


def discounted_intrinsic_value(S: float, K: float, T: float, r: float, option_type: OptionType) -> float:
    """Zero-volatility price: intrinsic value against the discounted strike."""
    discounted_strike = K * math.exp(-r * T)
    if option_type is OptionType.CALL:
        return max(S - discounted_strike, 0.0)
    return max(discounted_strike - S, 0.0)


def option_price(option_type: OptionType, S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Theoretical option price.

    T <= 0 gives intrinsic value, sigma <= 0 gives discounted intrinsic
    value; otherwise the Black-Scholes price floored at MIN_TICK.
    """
    if T <= 0:
        return intrinsic_value(S, K, option_type)
    if sigma <= 0:
        return discounted_intrinsic_value(S, K, T, r, option_type)

    price = float(black_scholes(option_type.flag, S, K, T, r, sigma))
    if not math.isfinite(price):
        price = discounted_intrinsic_value(S, K, T, r, option_type)
    return max(price, MIN_TICK)


def call_price(S: float, K: float, T: float, r: float, sigma: float) -> float:
    return option_price(OptionType.CALL, S, K, T, r, sigma)


def put_price(S: float, K: float, T: float, r: float, sigma: float) -> float:
    return option_price(OptionType.PUT, S, K, T, r, sigma)


# ── Greeks ──────────────────────────────────────────────────────


def delta(S: float, K: float, T: float, r: float, sigma: float, option_type: OptionType) -> float:
    """N(d1) for calls, N(d1) - 1 for puts; 0 or +/-1 by moneyness when degenerate."""
    if _is_degenerate(T, sigma):
        if option_type is OptionType.CALL:
            return 1.0 if S > K else 0.0
        return -1.0 if S < K else 0.0
    return float(bs_delta(option_type.flag, S, K, T, r, sigma))


def gamma(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """phi(d1) / (S sigma sqrt(T)); identical for calls and puts."""
    if _is_degenerate(T, sigma):
        return 0.0
    return float(bs_gamma("c", S, K, T, r, sigma))


def theta(S: float, K: float, T: float, r: float, sigma: float, option_type: OptionType) -> float:
    """Value decay per calendar day (annual theta / 365)."""
    if _is_degenerate(T, sigma):
        return 0.0
    return float(bs_theta(option_type.flag, S, K, T, r, sigma))


def vega(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """Price change per 1 percentage point of volatility."""
    if _is_degenerate(T, sigma):
        return 0.0
    return float(bs_vega("c", S, K, T, r, sigma))


def greeks(S: float, K: float, T: float, r: float, sigma: float, option_type: OptionType) -> OptionGreeks:
    """All four Greeks for one contract."""
    return OptionGreeks(
        delta=delta(S, K, T, r, sigma, option_type),
        gamma=gamma(S, K, T, r, sigma),
        theta=theta(S, K, T, r, sigma, option_type),
        vega=vega(S, K, T, r, sigma),
    )
