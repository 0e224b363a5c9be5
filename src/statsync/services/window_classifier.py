"""Time-window classification on calendar days."""

from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

import pytz

from statsync.core.timezone import get_business_tz, local_date, now_local
from statsync.domain.models import Weekday

WINDOW_LENGTH_DAYS = 7


class WindowClassifier:
    """
    Maps timestamps to fixed-length weekly windows.

    A window key is the calendar date (in the reference timezone) of the
    first day of the window, so keys are totally ordered by calendar time
    and unaffected by DST transitions. With a Monday anchor, windows are
    exactly ISO-8601 weeks.
    """

    def __init__(
        self,
        anchor: Weekday = Weekday.MONDAY,
        tz: Optional[pytz.BaseTzInfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._anchor = anchor
        self._tz = tz or get_business_tz()
        self._clock = clock or (lambda: now_local(self._tz))

    @property
    def anchor(self) -> Weekday:
        return self._anchor

    @property
    def tz(self) -> pytz.BaseTzInfo:
        return self._tz

    def now(self) -> datetime:
        """Current time as seen by this classifier."""
        return self._clock()

    def today(self) -> date:
        """Current calendar day in the reference timezone."""
        return local_date(self._clock(), self._tz)

    def day_key(self, timestamp: datetime) -> date:
        """Calendar day a timestamp falls on."""
        return local_date(timestamp, self._tz)

    def window_key(self, timestamp: datetime) -> date:
        """Return the start day of the window containing `timestamp`."""
        return self.window_key_for_day(self.day_key(timestamp))

    def window_key_for_day(self, day: date) -> date:
        offset = (day.weekday() - self._anchor.index) % WINDOW_LENGTH_DAYS
        return day - timedelta(days=offset)

    def current_window_key(self) -> date:
        return self.window_key_for_day(self.today())

    def is_current(self, timestamp: datetime) -> bool:
        """True if `timestamp` falls in the window containing now."""
        return self.window_key(timestamp) == self.current_window_key()

    def window_bounds(self, key: date) -> tuple[datetime, datetime]:
        """
        Return [start, end) of a window as aware datetimes.

        Each bound is localized separately so a DST change inside the
        window does not shift midnight.
        """
        start = self._tz.localize(datetime.combine(key, time.min))
        end = self._tz.localize(datetime.combine(key + timedelta(days=WINDOW_LENGTH_DAYS), time.min))
        return start, end

    def window_label(self, key: date) -> str:
        """Human-readable window name: ISO week for Monday anchors, else start date."""
        if self._anchor is Weekday.MONDAY:
            iso_year, iso_week, _ = key.isocalendar()
            return f"{iso_year}-W{iso_week:02d}"
        return key.isoformat()
