"""Paper-trading ledger: cash, stock positions, option positions, trade history."""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from catalyst_sim.config import SimulationConfig
from catalyst_sim.trading.accounting import apply_buy, apply_sell, mark_position, realized_pnl
from catalyst_sim.trading.models import (
    Instrument,
    OptionPosition,
    PaperAccount,
    PortfolioMetrics,
    Position,
    Trade,
    TradeError,
    TradeResult,
    TradeSide,
)
from catalyst_sim.trading.notifications import (
    AlertMonitor,
    LoggingNotificationSink,
    NotificationSink,
    dispatch,
)
from catalyst_sim.trading.validation import is_finite_number, validate_option_position, validate_order

logger = logging.getLogger(__name__)


def _normalize_ticker(ticker: str) -> str:
    return ticker.strip().upper()


class Ledger:
    """
    The paper account and everything it holds.

    Every mutating call validates, computes the new state, and commits the
    balance change, position change and trade record together under one
    lock, so no caller ever sees a half-applied trade. Business failures
    come back as ``TradeResult(success=False)``, never as exceptions.
    Accessors return copies; internal records are never handed out.

    Notifications are sent after the lock is released and their failures
    are logged and dropped.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        notifier: Optional[NotificationSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self._notifier = notifier or LoggingNotificationSink()
        self._clock = clock or datetime.now
        self._lock = threading.RLock()
        self._alerts = AlertMonitor(
            move_pct=self.config.price_alert_move_pct,
            pnl_step=self.config.pnl_alert_step,
        )

        self._account = self._initial_account()
        self._positions: Dict[str, Position] = {}
        self._option_positions: Dict[str, OptionPosition] = {}
        self._trades: List[Trade] = []  # most recent first
        self._trade_counter = 0
        self._option_counter = 0

    def _initial_account(self) -> PaperAccount:
        return PaperAccount(
            account_id=self.config.account_id,
            balance=self.config.starting_balance,
            starting_balance=self.config.starting_balance,
            created_at=self._clock(),
        )

    def _next_trade_id(self, now: datetime) -> str:
        self._trade_counter += 1
        return f"TRD_{now.strftime('%Y%m%d')}_{self._trade_counter:04d}"

    def _next_option_id(self, now: datetime) -> str:
        self._option_counter += 1
        return f"OPT_{now.strftime('%Y%m%d')}_{self._option_counter:04d}"

    def _reject(self, action: str, error: TradeError, message: str) -> TradeResult:
        logger.warning("%s rejected (%s): %s", action, error.value, message)
        return TradeResult(success=False, message=message, error=error)

    def _record(self, trade: Trade, balance_change: float) -> None:
        # Caller holds the lock and has already validated.
        self._account.balance += balance_change
        self._account.last_trade_date = trade.executed_at
        self._trades.insert(0, trade)

    def _notify_trade(self, trade: Trade) -> None:
        logger.info(
            "Executed %s %s %s x%s @ %.2f",
            trade.side.value, trade.instrument.value, trade.ticker,
            trade.quantity, trade.executed_price,
        )
        if self.config.trade_confirmations:
            dispatch(self._notifier.trade_executed, trade)

    # ── Stocks ──────────────────────────────────────────────────

    def buy_stock(
        self,
        ticker: str,
        quantity: int,
        price: float,
        catalyst_id: Optional[str] = None,
    ) -> TradeResult:
        """Buy shares. Fails with INSUFFICIENT_FUNDS if quantity * price exceeds cash."""
        check = validate_order(ticker, TradeSide.BUY, quantity, price)
        if not check.valid:
            return self._reject("Buy", TradeError.VALIDATION, check.error)
        ticker = _normalize_ticker(ticker)
        quantity, price = int(quantity), float(price)

        with self._lock:
            cost = quantity * price
            balance = self._account.balance
            if cost > balance:
                return self._reject(
                    "Buy", TradeError.INSUFFICIENT_FUNDS,
                    f"Insufficient balance. Need ${cost:,.2f}, have ${balance:,.2f}",
                )

            now = self._clock()
            position = apply_buy(self._positions.get(ticker), ticker, quantity, price, now, catalyst_id)
            trade = Trade(
                id=self._next_trade_id(now),
                ticker=ticker,
                side=TradeSide.BUY,
                instrument=Instrument.STOCK,
                quantity=quantity,
                executed_price=price,
                executed_at=now,
                total_value=cost,
                catalyst_id=position.catalyst_id,
            )
            self._positions[ticker] = position
            self._record(trade, -cost)

        self._notify_trade(trade)
        return TradeResult(success=True, message=f"Bought {quantity} {ticker} @ ${price:,.2f}", trade=trade)

    def sell_stock(self, ticker: str, quantity: int, price: float) -> TradeResult:
        """Sell shares. Fails with INSUFFICIENT_SHARES if quantity exceeds the holding."""
        check = validate_order(ticker, TradeSide.SELL, quantity, price)
        if not check.valid:
            return self._reject("Sell", TradeError.VALIDATION, check.error)
        ticker = _normalize_ticker(ticker)
        quantity, price = int(quantity), float(price)

        with self._lock:
            position = self._positions.get(ticker)
            held = position.quantity if position else 0
            if quantity > held:
                return self._reject(
                    "Sell", TradeError.INSUFFICIENT_SHARES,
                    f"Cannot sell {quantity} {ticker}; holding {held}",
                )

            now = self._clock()
            proceeds = quantity * price
            pnl, pnl_pct = realized_pnl(quantity, price, position.average_entry_price)
            remaining = apply_sell(position, quantity, price, now)
            trade = Trade(
                id=self._next_trade_id(now),
                ticker=ticker,
                side=TradeSide.SELL,
                instrument=Instrument.STOCK,
                quantity=quantity,
                executed_price=price,
                executed_at=now,
                total_value=proceeds,
                pnl=pnl,
                pnl_pct=pnl_pct,
                catalyst_id=position.catalyst_id,
            )
            if remaining is None:
                del self._positions[ticker]
            else:
                self._positions[ticker] = remaining
            self._record(trade, proceeds)

        self._notify_trade(trade)
        return TradeResult(success=True, message=f"Sold {quantity} {ticker} @ ${price:,.2f}", trade=trade)

    # ── Options ─────────────────────────────────────────────────

    def buy_option(self, position: OptionPosition) -> TradeResult:
        """
        Open a multi-leg option position as a single unit.

        ``position.total_cost`` is the signed net premium (contracts x 100
        already applied). A debit larger than cash is rejected; a credit
        adds to cash. A blank id is replaced with a generated one.
        """
        check = validate_option_position(position)
        if not check.valid:
            return self._reject("Option open", TradeError.VALIDATION, check.error)

        with self._lock:
            if position.id and position.id in self._option_positions:
                return self._reject(
                    "Option open", TradeError.VALIDATION,
                    f"Option position {position.id} is already open",
                )
            cost = position.total_cost
            balance = self._account.balance
            if cost > balance:
                return self._reject(
                    "Option open", TradeError.INSUFFICIENT_FUNDS,
                    f"Insufficient balance. Need ${cost:,.2f}, have ${balance:,.2f}",
                )

            now = self._clock()
            stored = copy.deepcopy(position)
            stored.ticker = _normalize_ticker(stored.ticker)
            stored.id = stored.id or self._next_option_id(now)
            stored.opened_at = stored.opened_at or now
            stored.unrealized_pnl = stored.current_value - stored.total_cost

            trade = Trade(
                id=self._next_trade_id(now),
                ticker=stored.ticker,
                side=TradeSide.BUY,
                instrument=Instrument.OPTION,
                quantity=stored.total_contracts,
                executed_price=cost,
                executed_at=now,
                total_value=cost,
                catalyst_id=stored.catalyst_id,
                notes=f"{stored.strategy.value} strategy [{stored.id}]",
            )
            self._option_positions[stored.id] = stored
            self._record(trade, -cost)

        self._notify_trade(trade)
        return TradeResult(success=True, message=f"Opened {stored.strategy.value} {stored.id}", trade=trade)

    def sell_option(self, position_id: str, current_value: float) -> TradeResult:
        """
        Close an option position at ``current_value`` (signed mark of all legs).

        Realized P&L is current_value - total_cost.
        """
        if not is_finite_number(current_value):
            return self._reject("Option close", TradeError.VALIDATION, "Mark value must be a finite number")
        current_value = float(current_value)

        with self._lock:
            position = self._option_positions.get(position_id)
            if position is None:
                return self._reject(
                    "Option close", TradeError.UNKNOWN_POSITION,
                    f"No open option position {position_id}",
                )
            balance = self._account.balance
            if balance + current_value < 0:
                return self._reject(
                    "Option close", TradeError.INSUFFICIENT_FUNDS,
                    f"Closing costs ${-current_value:,.2f}, have ${balance:,.2f}",
                )

            now = self._clock()
            pnl = current_value - position.total_cost
            basis = abs(position.total_cost)
            trade = Trade(
                id=self._next_trade_id(now),
                ticker=position.ticker,
                side=TradeSide.SELL,
                instrument=Instrument.OPTION,
                quantity=position.total_contracts,
                executed_price=current_value,
                executed_at=now,
                total_value=current_value,
                pnl=pnl,
                pnl_pct=(pnl / basis) * 100 if basis > 0 else 0.0,
                catalyst_id=position.catalyst_id,
                notes=f"Close {position.strategy.value} [{position.id}]",
            )
            del self._option_positions[position_id]
            self._record(trade, current_value)

        self._notify_trade(trade)
        return TradeResult(success=True, message=f"Closed {position_id}", trade=trade)

    # ── Marks ───────────────────────────────────────────────────

    def update_prices(self, prices: Mapping[str, float]) -> int:
        """
        Re-mark stock positions from a ``{ticker: price}`` snapshot.

        Tickers without a position and non-positive or non-finite prices are
        ignored. Never fails. Returns the number of positions re-marked.
        """
        moves: List[Tuple[str, float, float, str]] = []
        with self._lock:
            now = self._clock()
            updated = 0
            for raw_ticker, price in prices.items():
                ticker = _normalize_ticker(raw_ticker)
                position = self._positions.get(ticker)
                if position is None:
                    continue
                if not is_finite_number(price) or price <= 0:
                    logger.debug("Ignoring mark %r for %s", price, ticker)
                    continue

                price = float(price)
                marked = mark_position(position, price, now)
                self._positions[ticker] = marked
                updated += 1

                direction = self._alerts.position_move(position.unrealized_pnl_pct, marked.unrealized_pnl_pct)
                if direction:
                    moves.append((ticker, price, marked.unrealized_pnl_pct, direction))

            total_pnl = self._total_value() - self._account.starting_balance
            crossed = self._alerts.crossed_pnl_thresholds(total_pnl)

        for ticker, price, pct, direction in moves:
            dispatch(self._notifier.price_alert, ticker, price, pct, direction)
        self._send_pnl_alerts(total_pnl, crossed)
        return updated

    def update_option_values(self, values: Mapping[str, float]) -> int:
        """Re-mark option positions from ``{position_id: current_value}``. Unknown ids are ignored."""
        with self._lock:
            updated = 0
            for position_id, value in values.items():
                position = self._option_positions.get(position_id)
                if position is None or not is_finite_number(value):
                    continue
                value = float(value)
                self._option_positions[position_id] = replace(
                    position,
                    current_value=value,
                    unrealized_pnl=value - position.total_cost,
                )
                updated += 1
            total_pnl = self._total_value() - self._account.starting_balance
            crossed = self._alerts.crossed_pnl_thresholds(total_pnl)

        self._send_pnl_alerts(total_pnl, crossed)
        return updated

    def _send_pnl_alerts(self, total_pnl: float, crossed: List[float]) -> None:
        for threshold in crossed:
            direction = "profit" if threshold > 0 else "loss"
            dispatch(self._notifier.pnl_threshold_alert, total_pnl, direction, abs(threshold))

    # ── Reads ───────────────────────────────────────────────────

    @property
    def account(self) -> PaperAccount:
        with self._lock:
            return copy.deepcopy(self._account)

    @property
    def balance(self) -> float:
        with self._lock:
            return self._account.balance

    def get_position(self, ticker: str) -> Optional[Position]:
        with self._lock:
            return copy.deepcopy(self._positions.get(_normalize_ticker(ticker)))

    def has_position(self, ticker: str) -> bool:
        with self._lock:
            return _normalize_ticker(ticker) in self._positions

    def positions(self) -> Dict[str, Position]:
        with self._lock:
            return copy.deepcopy(self._positions)

    def get_option_position(self, position_id: str) -> Optional[OptionPosition]:
        with self._lock:
            return copy.deepcopy(self._option_positions.get(position_id))

    def option_positions(self) -> Dict[str, OptionPosition]:
        with self._lock:
            return copy.deepcopy(self._option_positions)

    def trade_history(self) -> List[Trade]:
        """All trades, most recent first."""
        with self._lock:
            return list(self._trades)

    def _total_value(self) -> float:
        stock_value = sum(p.current_value for p in self._positions.values())
        option_value = sum(p.current_value for p in self._option_positions.values())
        return self._account.balance + stock_value + option_value

    def get_total_value(self) -> float:
        with self._lock:
            return self._total_value()

    def realized_pnl(self) -> float:
        with self._lock:
            return sum(t.pnl for t in self._trades if t.is_closing)

    def accounting_gap(self) -> float:
        """
        balance + open cost basis - (starting balance + realized P&L).

        Zero (up to float rounding) after any sequence of operations.
        """
        with self._lock:
            open_cost = (
                sum(p.total_cost for p in self._positions.values())
                + sum(p.total_cost for p in self._option_positions.values())
            )
            realized = sum(t.pnl for t in self._trades if t.is_closing)
            return self._account.balance + open_cost - (self._account.starting_balance + realized)

    def get_metrics(self) -> PortfolioMetrics:
        """Portfolio value, gain and closed-trade statistics."""
        with self._lock:
            stock_value = sum(p.current_value for p in self._positions.values())
            option_value = sum(p.current_value for p in self._option_positions.values())
            total_value = self._account.balance + stock_value + option_value
            starting = self._account.starting_balance
            trades = list(self._trades)
            cash = self._account.balance

        total_gain = total_value - starting
        closed = [t.pnl for t in trades if t.is_closing]
        winners = [pnl for pnl in closed if pnl > 0]
        losers = [pnl for pnl in closed if pnl < 0]

        return PortfolioMetrics(
            total_value=total_value,
            cash_balance=cash,
            positions_value=stock_value,
            options_value=option_value,
            total_gain=total_gain,
            total_gain_pct=(total_gain / starting) * 100 if starting > 0 else 0.0,
            win_rate=len(winners) / len(closed) if closed else 0.0,
            total_trades=len(trades),
            winning_trades=len(winners),
            losing_trades=len(losers),
            largest_win=max(winners) if winners else 0.0,
            largest_loss=min(losers) if losers else 0.0,
            avg_trade_pnl=sum(closed) / len(closed) if closed else 0.0,
            realized_pnl=sum(closed),
        )

    # ── Lifecycle & persistence ─────────────────────────────────

    def reset_account(self) -> None:
        """Back to a fresh account with the configured starting balance."""
        with self._lock:
            self._account = self._initial_account()
            self._positions = {}
            self._option_positions = {}
            self._trades = []
            self._trade_counter = 0
            self._option_counter = 0
            self._alerts.reset()
        logger.info("Paper account %s reset", self._account.account_id)

    def to_dict(self) -> Dict[str, Any]:
        """Full ledger state as plain data."""
        with self._lock:
            return {
                "account": self._account.to_dict(),
                "positions": {t: p.to_dict() for t, p in self._positions.items()},
                "option_positions": {pid: p.to_dict() for pid, p in self._option_positions.items()},
                "trade_history": [t.to_dict() for t in self._trades],
                "trade_counter": self._trade_counter,
                "option_counter": self._option_counter,
            }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        config: Optional[SimulationConfig] = None,
        notifier: Optional[NotificationSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "Ledger":
        """Rebuild a ledger from ``to_dict()`` output."""
        ledger = cls(config=config, notifier=notifier, clock=clock)
        ledger._account = PaperAccount.from_dict(data["account"])
        ledger._positions = {
            t: Position.from_dict(p) for t, p in data.get("positions", {}).items()
        }
        ledger._option_positions = {
            pid: OptionPosition.from_dict(p) for pid, p in data.get("option_positions", {}).items()
        }
        ledger._trades = [Trade.from_dict(t) for t in data.get("trade_history", [])]
        ledger._trade_counter = data.get("trade_counter", len(ledger._trades))
        ledger._option_counter = data.get("option_counter", 0)
        ledger._alerts.prime(ledger._total_value() - ledger._account.starting_balance)
        return ledger
