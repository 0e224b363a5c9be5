"""Displayed statistics endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from statsync.api.deps import get_stats_service
from statsync.api.schemas import (
    LatestItemResponse,
    MutationRequest,
    RefreshResponse,
    StatsResponse,
)
from statsync.domain.models import Item, MutationEvent
from statsync.domain.views import EffectiveStats
from statsync.services import StatisticsService

router = APIRouter(prefix="/stats", tags=["stats"])


def _to_response(stats: EffectiveStats) -> StatsResponse:
    return StatsResponse(**asdict(stats))


@router.get("", response_model=StatsResponse)
def get_stats(service: StatisticsService = Depends(get_stats_service)) -> StatsResponse:
    """Get the values currently displayed (baseline plus pending deltas)."""
    return _to_response(service.get_effective_stats())


@router.post("/mutations", response_model=StatsResponse, status_code=202)
async def notify_mutation(
    data: MutationRequest,
    service: StatisticsService = Depends(get_stats_service),
) -> StatsResponse:
    """Apply an item change signal and return the updated optimistic values."""
    item = None
    if data.item is not None:
        item = Item(
            item_id=data.item.item_id,
            timestamp=data.item.timestamp,
            category=data.item.category,
            flags=frozenset({"favorite"}) if data.item.favorite else frozenset(),
        )
    service.notify_mutation(MutationEvent(type=data.type, item=item, mode=data.mode))
    return _to_response(service.get_effective_stats())


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_stats(service: StatisticsService = Depends(get_stats_service)) -> RefreshResponse:
    """Run a silent refresh now and wait for it."""
    refreshed = await service.refresh_silent()
    return RefreshResponse(refreshed=refreshed, stats=_to_response(service.get_effective_stats()))


@router.get("/latest", response_model=list[LatestItemResponse])
async def get_latest_items(
    limit: int = Query(3, ge=1, le=50, description="Number of recent items"),
    service: StatisticsService = Depends(get_stats_service),
) -> list[LatestItemResponse]:
    """Get the most recent items, newest first."""
    items = await service.get_latest_items(limit)
    return [
        LatestItemResponse(
            item_id=i.item_id,
            timestamp=i.timestamp,
            category=i.category,
            favorite=i.is_favorite,
        )
        for i in items
    ]
