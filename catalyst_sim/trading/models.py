"""Trading layer models - account, positions, option legs, trades, results."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from catalyst_sim.pricing.models import OptionGreeks, OptionType


class TradeSide(Enum):
    BUY = "BUY"
    SELL = "SELL"


class Instrument(Enum):
    STOCK = "STOCK"
    OPTION = "OPTION"


class LegSide(Enum):
    """Direction of one option leg."""

    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        return 1 if self is LegSide.LONG else -1


class StrategyType(Enum):
    CALL = "CALL"
    PUT = "PUT"
    STRADDLE = "STRADDLE"
    STRANGLE = "STRANGLE"
    IRON_CONDOR = "IRON_CONDOR"
    BULL_CALL_SPREAD = "BULL_CALL_SPREAD"
    BEAR_PUT_SPREAD = "BEAR_PUT_SPREAD"


class TradeError(Enum):
    """Why a ledger mutation was rejected."""

    VALIDATION = "validation_error"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_SHARES = "insufficient_shares"
    UNKNOWN_POSITION = "unknown_position"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class PaperAccount:
    """Cash side of the paper account."""

    account_id: str
    balance: float
    starting_balance: float
    created_at: datetime
    last_trade_date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "balance": self.balance,
            "starting_balance": self.starting_balance,
            "created_at": self.created_at.isoformat(),
            "last_trade_date": _iso(self.last_trade_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaperAccount":
        return cls(
            account_id=data["account_id"],
            balance=data["balance"],
            starting_balance=data["starting_balance"],
            created_at=datetime.fromisoformat(data["created_at"]),
            last_trade_date=_parse_dt(data.get("last_trade_date")),
        )


@dataclass
class Position:
    """
    Open stock position for one ticker, marked at current_price.
    """

    ticker: str
    quantity: int
    average_entry_price: float
    current_price: float
    total_cost: float
    current_value: float
    unrealized_pnl: float
    unrealized_pnl_pct: float
    opened_at: datetime
    last_updated: datetime
    catalyst_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "quantity": self.quantity,
            "average_entry_price": self.average_entry_price,
            "current_price": self.current_price,
            "total_cost": self.total_cost,
            "current_value": self.current_value,
            "unrealized_pnl": self.unrealized_pnl,
            "unrealized_pnl_pct": self.unrealized_pnl_pct,
            "opened_at": self.opened_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "catalyst_id": self.catalyst_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        return cls(
            ticker=data["ticker"],
            quantity=data["quantity"],
            average_entry_price=data["average_entry_price"],
            current_price=data["current_price"],
            total_cost=data["total_cost"],
            current_value=data["current_value"],
            unrealized_pnl=data["unrealized_pnl"],
            unrealized_pnl_pct=data["unrealized_pnl_pct"],
            opened_at=datetime.fromisoformat(data["opened_at"]),
            last_updated=datetime.fromisoformat(data["last_updated"]),
            catalyst_id=data.get("catalyst_id"),
        )


@dataclass
class OptionLeg:
    """One leg of an option position. Premiums are per share."""

    option_type: OptionType
    strike: float
    expiration: date
    side: LegSide
    contracts: int
    premium_per_contract: float
    current_premium: float
    greeks: OptionGreeks = field(default_factory=OptionGreeks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "option_type": self.option_type.value,
            "strike": self.strike,
            "expiration": self.expiration.isoformat(),
            "side": self.side.value,
            "contracts": self.contracts,
            "premium_per_contract": self.premium_per_contract,
            "current_premium": self.current_premium,
            "greeks": self.greeks.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptionLeg":
        return cls(
            option_type=OptionType(data["option_type"]),
            strike=data["strike"],
            expiration=date.fromisoformat(data["expiration"]),
            side=LegSide(data["side"]),
            contracts=data["contracts"],
            premium_per_contract=data["premium_per_contract"],
            current_premium=data["current_premium"],
            greeks=OptionGreeks.from_dict(data.get("greeks")),
        )


@dataclass
class OptionPosition:
    """
    Multi-leg option position opened and closed as a unit.

    total_cost is the signed net premium: positive for a debit,
    negative for a credit.
    """

    id: str
    ticker: str
    strategy: StrategyType
    legs: List[OptionLeg]
    total_cost: float
    current_value: float
    unrealized_pnl: float = 0.0
    catalyst_id: Optional[str] = None
    opened_at: Optional[datetime] = None

    @property
    def total_contracts(self) -> int:
        return sum(leg.contracts for leg in self.legs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ticker": self.ticker,
            "strategy": self.strategy.value,
            "legs": [leg.to_dict() for leg in self.legs],
            "total_cost": self.total_cost,
            "current_value": self.current_value,
            "unrealized_pnl": self.unrealized_pnl,
            "catalyst_id": self.catalyst_id,
            "opened_at": _iso(self.opened_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptionPosition":
        return cls(
            id=data["id"],
            ticker=data["ticker"],
            strategy=StrategyType(data["strategy"]),
            legs=[OptionLeg.from_dict(leg) for leg in data["legs"]],
            total_cost=data["total_cost"],
            current_value=data["current_value"],
            unrealized_pnl=data.get("unrealized_pnl", 0.0),
            catalyst_id=data.get("catalyst_id"),
            opened_at=_parse_dt(data.get("opened_at")),
        )


@dataclass(frozen=True)
class Trade:
    """Executed trade. pnl/pnl_pct are set on closing trades only."""

    id: str
    ticker: str
    side: TradeSide
    instrument: Instrument
    quantity: int
    executed_price: float
    executed_at: datetime
    total_value: float
    pnl: Optional[float] = None
    pnl_pct: Optional[float] = None
    catalyst_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_closing(self) -> bool:
        return self.side is TradeSide.SELL and self.pnl is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ticker": self.ticker,
            "side": self.side.value,
            "instrument": self.instrument.value,
            "quantity": self.quantity,
            "executed_price": self.executed_price,
            "executed_at": self.executed_at.isoformat(),
            "total_value": self.total_value,
            "pnl": self.pnl,
            "pnl_pct": self.pnl_pct,
            "catalyst_id": self.catalyst_id,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trade":
        return cls(
            id=data["id"],
            ticker=data["ticker"],
            side=TradeSide(data["side"]),
            instrument=Instrument(data["instrument"]),
            quantity=data["quantity"],
            executed_price=data["executed_price"],
            executed_at=datetime.fromisoformat(data["executed_at"]),
            total_value=data["total_value"],
            pnl=data.get("pnl"),
            pnl_pct=data.get("pnl_pct"),
            catalyst_id=data.get("catalyst_id"),
            notes=data.get("notes"),
        )


@dataclass
class TradeResult:
    """Outcome of a ledger mutation."""

    success: bool
    message: str
    error: Optional[TradeError] = None
    trade: Optional[Trade] = None


@dataclass
class PortfolioMetrics:
    """Derived portfolio statistics. win_rate is a fraction in [0, 1]."""

    total_value: float
    cash_balance: float
    positions_value: float
    options_value: float
    total_gain: float
    total_gain_pct: float
    win_rate: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    largest_win: float
    largest_loss: float
    avg_trade_pnl: float
    realized_pnl: float
