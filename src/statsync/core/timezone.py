"""Timezone utilities for the business reference timezone.

All calendar-day arithmetic (streaks, windows) happens on dates in a single
reference timezone so that DST changes and client timezones never move an
item into a different day.
"""

from datetime import date, datetime
from typing import Optional, Union

import pytz
from dateutil import parser as date_parser

from statsync.config.settings import get_settings


def get_business_tz() -> pytz.BaseTzInfo:
    """Return the configured reference timezone."""
    return pytz.timezone(get_settings().business_timezone)


def now_local(tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Return current time in the reference timezone."""
    return datetime.now(tz or get_business_tz())


def to_local(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Convert a datetime to the reference timezone."""
    tz = tz or get_business_tz()
    if dt.tzinfo is None:
        # Assume naive datetime is already in the reference timezone
        return tz.localize(dt)
    return dt.astimezone(tz)


def local_date(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> date:
    """Return the calendar day of a datetime in the reference timezone."""
    return to_local(dt, tz).date()


def parse_timestamp(
    value: Union[str, int, float, datetime, None],
    tz: Optional[pytz.BaseTzInfo] = None,
) -> Optional[datetime]:
    """
    Parse an upstream timestamp into an aware datetime.

    Accepts ISO strings, epoch milliseconds and datetimes. Strings without
    an offset are assumed to be in the reference timezone. Returns None
    for empty or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_local(value, tz)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=pytz.UTC)
    try:
        dt = date_parser.parse(value)
    except (ValueError, OverflowError):
        return None
    return to_local(dt, tz)
