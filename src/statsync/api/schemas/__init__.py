"""API request/response schemas."""

from statsync.api.schemas.stats import (
    SessionStart,
    SessionResponse,
    ItemPayload,
    MutationRequest,
    StatsResponse,
    RefreshResponse,
    LatestItemResponse,
)

__all__ = [
    "SessionStart",
    "SessionResponse",
    "ItemPayload",
    "MutationRequest",
    "StatsResponse",
    "RefreshResponse",
    "LatestItemResponse",
]
