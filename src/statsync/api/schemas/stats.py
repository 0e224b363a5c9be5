"""Pydantic schemas for stats endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from statsync.domain.models import ActivityLevel, DeleteMode, MutationType


class SessionStart(BaseModel):
    """Request schema for starting a stats session."""

    user_id: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """Response schema for session state."""

    user_id: Optional[str] = None
    active: bool


class ItemPayload(BaseModel):
    """Item as sent with a mutation signal."""

    item_id: str = Field(..., min_length=1)
    timestamp: Optional[datetime] = None
    category: Optional[str] = None
    favorite: bool = False


class MutationRequest(BaseModel):
    """Request schema for an item change signal."""

    type: MutationType
    item: Optional[ItemPayload] = None
    mode: DeleteMode = DeleteMode.OPTIMISTIC


class StatsResponse(BaseModel):
    """Response schema for the displayed statistics."""

    total_count: int
    window_count: int
    streak_length: int
    favorite_category: Optional[str] = None
    streak_to_yesterday: int
    is_awaiting_today: bool
    trailing_count: int
    favorites_count: int
    activity_level: ActivityLevel
    days_in_app: int
    window_label: Optional[str] = None
    loading: bool
    loaded_at: Optional[datetime] = None


class RefreshResponse(BaseModel):
    """Response schema for an explicit silent refresh."""

    refreshed: bool
    stats: StatsResponse


class LatestItemResponse(BaseModel):
    """Response schema for a single recent item."""

    item_id: str
    timestamp: Optional[datetime] = None
    category: Optional[str] = None
    favorite: bool = False
