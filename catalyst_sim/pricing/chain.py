"""Synthetic options chain for a stock with an upcoming catalyst."""

import math
from datetime import date
from typing import List, Optional, Sequence

from catalyst_sim.dates import days_until
from catalyst_sim.pricing import black_scholes as bs
from catalyst_sim.pricing.models import (
    CatalystContext,
    OptionContract,
    OptionsChain,
    OptionType,
)
from catalyst_sim.pricing.volatility import (
    DEFAULT_VOLATILITY_PARAMS,
    VolatilityParams,
    derive_iv,
)

STRIKE_RANGE_PCT = 0.30
DEFAULT_RISK_FREE_RATE = 0.05


def strike_increment(spot: float) -> float:
    """Strike spacing by price bracket: $1 under $20, $2.50 under $50, else $5."""
    if spot < 20:
        return 1.0
    if spot < 50:
        return 2.5
    return 5.0


def strike_ladder(spot: float) -> List[float]:
    """Strikes covering roughly +/-30% of spot at the bracket increment."""
    increment = strike_increment(spot)
    lower = max(1.0, math.floor(spot * (1 - STRIKE_RANGE_PCT) / increment) * increment)
    upper = math.ceil(spot * (1 + STRIKE_RANGE_PCT) / increment) * increment

    # step by index so float accumulation cannot add or drop a strike
    steps = int(round((upper - lower) / increment))
    return [round(lower + i * increment, 2) for i in range(steps + 1)]


def contract_id(ticker: str, option_type: OptionType, strike: float, expiration: date) -> str:
    return f"{ticker}-{option_type.code}-{strike:g}-{expiration.isoformat()}"


def generate_options_chain(
    ticker: str,
    spot: float,
    catalyst: CatalystContext,
    as_of: Optional[date] = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    params: VolatilityParams = DEFAULT_VOLATILITY_PARAMS,
) -> OptionsChain:
    """
    Price a call and a put at every strike on the ladder, expiring on the
    catalyst date.

    Volatility comes from the catalyst IV model; time to expiry is at least
    one day so every contract carries time value. Identical inputs always
    produce an equal chain.
    """
    days = days_until(catalyst.event_date, as_of)
    iv = derive_iv(catalyst.tier, catalyst.approval_probability, days, params)
    dte = max(days, 1)
    T = dte / 365.0
    expiration = catalyst.event_date

    def _contract(option_type: OptionType, K: float) -> OptionContract:
        premium = bs.option_price(option_type, spot, K, T, risk_free_rate, iv)
        return OptionContract(
            id=contract_id(ticker, option_type, K, expiration),
            ticker=ticker,
            option_type=option_type,
            strike=K,
            expiration=expiration,
            premium=max(round(premium, 2), bs.MIN_TICK),
            implied_volatility=iv,
            days_to_expiration=dte,
            greeks=bs.greeks(spot, K, T, risk_free_rate, iv, option_type),
        )

    strikes = strike_ladder(spot)
    return OptionsChain(
        ticker=ticker,
        spot=spot,
        expiration=expiration,
        calls=tuple(_contract(OptionType.CALL, K) for K in strikes),
        puts=tuple(_contract(OptionType.PUT, K) for K in strikes),
    )


def find_nearest_strike(contracts: Sequence[OptionContract], target: float) -> OptionContract:
    """Contract whose strike is closest to target; the lower strike wins a tie."""
    if not contracts:
        raise ValueError("No contracts to search")
    return min(contracts, key=lambda c: (abs(c.strike - target), c.strike))


def find_atm_contract(contracts: Sequence[OptionContract], spot: float) -> OptionContract:
    """At-the-money contract: strike nearest spot."""
    return find_nearest_strike(contracts, spot)
