"""Derived metric calculations over item lists.

Pure functions: no caching, no I/O, safe to call speculatively. Items
without a timestamp are ignored by every time-based metric.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

import pytz

from statsync.core.timezone import to_local
from statsync.domain.models import ActivityLevel, Item
from statsync.domain.views import DerivedMetrics
from statsync.services.window_classifier import WindowClassifier


def _dated(items: Iterable[Item]) -> list[Item]:
    return [item for item in items if item.timestamp is not None]


def active_days(items: Iterable[Item], classifier: WindowClassifier) -> set[date]:
    """Return the set of calendar days that contain at least one item."""
    return {classifier.day_key(item.timestamp) for item in _dated(items)}


def _streak_ending(days: set[date], last_day: date) -> int:
    streak = 0
    cursor = last_day
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def streak_length(
    items: Iterable[Item],
    classifier: WindowClassifier,
    today: Optional[date] = None,
) -> int:
    """
    Count consecutive active days walking backward from today.

    Stops at the first day without items; 0 if today has none.
    """
    today = today or classifier.today()
    return _streak_ending(active_days(items, classifier), today)


def streak_to_yesterday(
    items: Iterable[Item],
    classifier: WindowClassifier,
    today: Optional[date] = None,
) -> tuple[int, bool]:
    """
    Streak that ended yesterday, for users who have not been active today.

    Returns (streak, is_awaiting_today). When today already continues the
    streak this is (0, False).
    """
    today = today or classifier.today()
    days = active_days(items, classifier)
    if today in days:
        return 0, False
    streak = _streak_ending(days, today - timedelta(days=1))
    return streak, streak > 0


def _since(
    items: Iterable[Item],
    now: datetime,
    days: int,
    tz: Optional[pytz.BaseTzInfo],
) -> list[Item]:
    # Naive timestamps are reference-timezone time, as everywhere else
    cutoff = to_local(now, tz) - timedelta(days=days)
    return [item for item in _dated(items) if to_local(item.timestamp, tz) >= cutoff]


def favorite_category(
    items: Iterable[Item],
    now: datetime,
    window_days: int = 30,
    tz: Optional[pytz.BaseTzInfo] = None,
) -> Optional[str]:
    """
    Most frequent category among items from the trailing `window_days`.

    Ties go to the category encountered first. None when no categorized
    item is in range.
    """
    counts: Counter[str] = Counter(
        item.category for item in _since(items, now, window_days, tz) if item.category
    )
    if not counts:
        return None
    # max() keeps the first maximal key and Counter keeps insertion order
    return max(counts, key=counts.__getitem__)


def window_count(items: Iterable[Item], classifier: WindowClassifier) -> int:
    """Count items in the current window."""
    current = classifier.current_window_key()
    return sum(1 for item in _dated(items) if classifier.window_key(item.timestamp) == current)


def trailing_count(
    items: Iterable[Item],
    now: datetime,
    days: int,
    tz: Optional[pytz.BaseTzInfo] = None,
) -> int:
    """Count items created within the last `days` days."""
    return len(_since(items, now, days, tz))


def flagged_count(items: Iterable[Item], flag: str = "favorite") -> int:
    """Count items carrying `flag`."""
    return sum(1 for item in items if flag in item.flags)


def activity_level(count: int, medium_threshold: int = 5, high_threshold: int = 15) -> ActivityLevel:
    """Rate a trailing item count."""
    if count >= high_threshold:
        return ActivityLevel.HIGH
    if count >= medium_threshold:
        return ActivityLevel.MEDIUM
    return ActivityLevel.LOW


def compute_derived_metrics(
    items: Iterable[Item],
    classifier: WindowClassifier,
    favorite_window_days: int = 30,
    trailing_window_days: int = 30,
    activity_window_days: int = 7,
    activity_medium_threshold: int = 5,
    activity_high_threshold: int = 15,
) -> DerivedMetrics:
    """Compute every derived metric from one item list at the classifier's now."""
    items = list(items)
    now = classifier.now()
    today = classifier.today()

    streak = streak_length(items, classifier, today)
    to_yesterday, awaiting = streak_to_yesterday(items, classifier, today)

    return DerivedMetrics(
        streak_length=streak,
        favorite_category=favorite_category(items, now, favorite_window_days, classifier.tz),
        window_count=window_count(items, classifier),
        streak_to_yesterday=to_yesterday,
        is_awaiting_today=awaiting,
        trailing_count=trailing_count(items, now, trailing_window_days, classifier.tz),
        favorites_count=flagged_count(items),
        activity_level=activity_level(
            trailing_count(items, now, activity_window_days, classifier.tz),
            activity_medium_threshold,
            activity_high_threshold,
        ),
    )
