"""Market calendar helpers."""

from datetime import date, datetime
from typing import Optional, Union

import pytz

EASTERN = pytz.timezone("US/Eastern")


def market_today() -> date:
    """Current date on the US/Eastern market clock."""
    return datetime.now(EASTERN).date()


def to_date(value: Union[date, datetime, str]) -> date:
    """Coerce an ISO string, datetime or date to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def days_until(event_date: Union[date, datetime, str], as_of: Optional[date] = None) -> int:
    """Calendar days from ``as_of`` (default: market today) to the event.

    Negative once the event has passed.
    """
    start = as_of or market_today()
    return (to_date(event_date) - start).days
