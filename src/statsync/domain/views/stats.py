"""View models for statistics outputs."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from statsync.domain.models.enums import ActivityLevel


@dataclass(frozen=True)
class AggregateSnapshot:
    """
    Canonical authoritative counts for one user scope.

    Produced by the provider boundary; `window_count` is None when the
    upstream does not report it and must be derived from the item list.
    """

    total_count: int
    window_count: Optional[int] = None
    days_in_app: int = 0


@dataclass(frozen=True)
class DerivedMetrics:
    """Metrics recomputed from an item list. Never persisted."""

    streak_length: int = 0
    favorite_category: Optional[str] = None
    window_count: int = 0
    streak_to_yesterday: int = 0
    is_awaiting_today: bool = False
    trailing_count: int = 0
    favorites_count: int = 0
    activity_level: ActivityLevel = ActivityLevel.LOW


@dataclass(frozen=True)
class EffectiveStats:
    """Values currently shown to the user."""

    total_count: int = 0
    window_count: int = 0
    streak_length: int = 0
    favorite_category: Optional[str] = None
    streak_to_yesterday: int = 0
    is_awaiting_today: bool = False
    trailing_count: int = 0
    favorites_count: int = 0
    activity_level: ActivityLevel = ActivityLevel.LOW
    days_in_app: int = 0
    window_label: Optional[str] = None
    loading: bool = False
    loaded_at: Optional[datetime] = None
