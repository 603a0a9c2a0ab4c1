"""Notification sink interface and mark-to-market alert thresholds."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Protocol, runtime_checkable

from catalyst_sim.trading.models import Trade

logger = logging.getLogger(__name__)


@runtime_checkable
class NotificationSink(Protocol):
    """Fire-and-forget receiver for trade and portfolio alerts."""

    def trade_executed(self, trade: Trade) -> None: ...
    def price_alert(self, ticker: str, price: float, pnl_pct: float, direction: str) -> None: ...
    def pnl_threshold_alert(self, total_pnl: float, direction: str, threshold: float) -> None: ...


class LoggingNotificationSink:
    """Default sink: writes every notification to the log."""

    def trade_executed(self, trade: Trade) -> None:
        logger.info(
            "%s %s %s x%s @ %.2f = %.2f",
            trade.side.value, trade.instrument.value, trade.ticker,
            trade.quantity, trade.executed_price, trade.total_value,
        )

    def price_alert(self, ticker: str, price: float, pnl_pct: float, direction: str) -> None:
        logger.info("Price alert %s %s: now %.2f (P&L %+.1f%%)", ticker, direction, price, pnl_pct)

    def pnl_threshold_alert(self, total_pnl: float, direction: str, threshold: float) -> None:
        logger.info(
            "Portfolio %s alert: total P&L %+.2f crossed %.0f",
            direction, total_pnl, threshold,
        )


def dispatch(callback: Callable[..., Any], *args: Any) -> None:
    """Call a sink method, logging and discarding any failure."""
    try:
        callback(*args)
    except Exception as e:
        logger.warning("Notification %s failed: %s", getattr(callback, "__name__", callback), e)


class AlertMonitor:
    """
    Decides when mark-to-market updates should raise alerts.

    Position moves alert when the P&L percentage changes by at least
    ``move_pct`` points in one update. Aggregate P&L alerts fire once for
    every ``pnl_step`` boundary crossed moving away from zero, however large
    the jump; drifting back toward zero re-arms the boundaries passed.
    """

    def __init__(self, move_pct: float = 5.0, pnl_step: float = 1000.0):
        self.move_pct = move_pct
        self.pnl_step = pnl_step
        self._pnl_level = 0  # signed count of boundaries already alerted

    def position_move(self, old_pct: float, new_pct: float) -> str | None:
        """'up' or 'down' when the move reaches the threshold, else None."""
        if self.move_pct <= 0 or abs(new_pct - old_pct) < self.move_pct:
            return None
        return "up" if new_pct > old_pct else "down"

    def crossed_pnl_thresholds(self, total_pnl: float) -> List[float]:
        """Signed boundaries newly crossed by ``total_pnl``, nearest zero first."""
        if self.pnl_step <= 0 or not math.isfinite(total_pnl):
            return []

        level = int(total_pnl / self.pnl_step)  # truncates toward zero
        previous = self._pnl_level
        crossed: List[float] = []

        if level > 0 and level > max(previous, 0):
            crossed = [k * self.pnl_step for k in range(max(previous, 0) + 1, level + 1)]
        elif level < 0 and level < min(previous, 0):
            crossed = [-k * self.pnl_step for k in range(-min(previous, 0) + 1, -level + 1)]

        self._pnl_level = level
        return crossed

    def prime(self, total_pnl: float) -> None:
        """Adopt the current P&L level without alerting (e.g. after a restore)."""
        if self.pnl_step > 0 and math.isfinite(total_pnl):
            self._pnl_level = int(total_pnl / self.pnl_step)

    def reset(self) -> None:
        self._pnl_level = 0
