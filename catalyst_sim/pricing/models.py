"""Pricing layer models - option types, catalyst context, contracts and chains."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple, Union


class OptionType(Enum):
    """Call or put."""

    CALL = "CALL"
    PUT = "PUT"

    @property
    def flag(self) -> str:
        """Single-letter flag used by py_vollib."""
        return "c" if self is OptionType.CALL else "p"

    @property
    def code(self) -> str:
        return "C" if self is OptionType.CALL else "P"


class RiskTier(IntEnum):
    """Ordinal catalyst risk classification, most to least favorable outcome."""

    TIER_1 = 1
    TIER_2 = 2
    TIER_3 = 3
    TIER_4 = 4

    @classmethod
    def parse(cls, value: Union["RiskTier", int, str, None]) -> "RiskTier":
        """Accepts ``RiskTier``, ``2``, ``"2"`` or ``"TIER_2"``. Unknown -> TIER_4."""
        if isinstance(value, cls):
            return value
        try:
            if isinstance(value, str):
                text = value.strip().upper()
                if text in cls.__members__:
                    return cls[text]
                return cls(int(text.replace("TIER_", "").replace("T", "")))
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.TIER_4


@dataclass(frozen=True)
class CatalystContext:
    """Catalyst record as supplied by the catalyst source."""

    ticker: str
    event_date: date
    tier: RiskTier
    approval_probability: float
    catalyst_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "event_date": self.event_date.isoformat(),
            "tier": self.tier.name,
            "approval_probability": self.approval_probability,
            "catalyst_id": self.catalyst_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalystContext":
        return cls(
            ticker=data["ticker"],
            event_date=date.fromisoformat(data["event_date"]),
            tier=RiskTier.parse(data.get("tier")),
            approval_probability=float(data["approval_probability"]),
            catalyst_id=data.get("catalyst_id"),
        )


@dataclass(frozen=True)
class OptionGreeks:
    """Option sensitivities. Theta is per calendar day, vega per vol point."""

    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"delta": self.delta, "gamma": self.gamma, "theta": self.theta, "vega": self.vega}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "OptionGreeks":
        data = data or {}
        return cls(
            delta=float(data.get("delta", 0.0)),
            gamma=float(data.get("gamma", 0.0)),
            theta=float(data.get("theta", 0.0)),
            vega=float(data.get("vega", 0.0)),
        )


@dataclass(frozen=True)
class OptionContract:
    """
    A single synthetic option contract. Premium is quoted per share.
    """

    id: str
    ticker: str
    option_type: OptionType
    strike: float
    expiration: date
    premium: float
    implied_volatility: float
    days_to_expiration: int
    greeks: OptionGreeks = field(default_factory=OptionGreeks)

    @property
    def cost_per_contract(self) -> float:
        """Premium for one 100-share contract."""
        return self.premium * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ticker": self.ticker,
            "option_type": self.option_type.value,
            "strike": self.strike,
            "expiration": self.expiration.isoformat(),
            "premium": self.premium,
            "implied_volatility": self.implied_volatility,
            "days_to_expiration": self.days_to_expiration,
            "greeks": self.greeks.to_dict(),
        }


@dataclass(frozen=True)
class OptionsChain:
    """Calls and puts for one expiration, each sorted by ascending strike."""

    ticker: str
    spot: float
    expiration: date
    calls: Tuple[OptionContract, ...]
    puts: Tuple[OptionContract, ...]

    @property
    def strikes(self) -> Tuple[float, ...]:
        return tuple(c.strike for c in self.calls)

    def contracts(self, option_type: OptionType) -> Tuple[OptionContract, ...]:
        return self.calls if option_type is OptionType.CALL else self.puts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "spot": self.spot,
            "expiration": self.expiration.isoformat(),
            "calls": [c.to_dict() for c in self.calls],
            "puts": [p.to_dict() for p in self.puts],
        }
