"""Statistics service: optimistic stats for one user session."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from statsync.config.settings import Settings, get_settings
from statsync.core.exceptions import AppError, MissingScopeError, ValidationError
from statsync.domain.models import Item, MutationEvent, MutationType
from statsync.domain.views import AggregateSnapshot, DerivedMetrics, EffectiveStats
from statsync.providers.item_data_provider import ItemDataProvider
from statsync.services.aggregate_ledger import AggregateLedger
from statsync.services.derived_metrics import compute_derived_metrics
from statsync.services.read_through_cache import ReadThroughCache
from statsync.services.window_classifier import WindowClassifier

logger = logging.getLogger(__name__)

StatsCallback = Callable[[EffectiveStats], None]


class StatisticsService:
    """
    Entry point between item mutations, the remote provider and the UI.

    Mutations update the ledger synchronously, notify subscribers, drop
    cached aggregates and schedule a silent refresh on the running event
    loop. A refresh fetches the authoritative snapshot and item list
    through the read-through cache, reconciles the ledger and recomputes
    derived metrics. Silent refresh failures are logged and the optimistic
    values stay on screen.
    """

    def __init__(
        self,
        provider: ItemDataProvider,
        cache: ReadThroughCache,
        classifier: WindowClassifier,
        scope: Optional[str],
        settings: Optional[Settings] = None,
    ):
        self._provider = provider
        self._cache = cache
        self._classifier = classifier
        self._scope = scope
        self._settings = settings or get_settings()

        self._ledgers: dict[str, AggregateLedger] = {}
        self._derived = DerivedMetrics()
        self._days_in_app = 0
        self._loaded_at: Optional[datetime] = None
        self._loading = False

        self._subscribers: list[StatsCallback] = []
        self._refresh_task: Optional[asyncio.Task] = None
        self._refresh_again = False
        self._latest_limits: set[int] = set()

    @property
    def scope(self) -> Optional[str]:
        return self._scope

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def ledger(self, family: Optional[str] = None) -> AggregateLedger:
        """Return the ledger for `family`, creating it on first access."""
        family = family or self._settings.ledger_family
        if family not in self._ledgers:
            self._ledgers[family] = AggregateLedger(family, self._classifier)
        return self._ledgers[family]

    # ------------------------------------------------------------------
    # Presentation interface
    # ------------------------------------------------------------------

    def get_effective_stats(self) -> EffectiveStats:
        """Synchronous read of the values currently displayed."""
        ledger = self.ledger()
        derived = self._derived
        return EffectiveStats(
            total_count=ledger.effective_total(),
            window_count=ledger.effective_window(),
            streak_length=derived.streak_length,
            favorite_category=derived.favorite_category,
            streak_to_yesterday=derived.streak_to_yesterday,
            is_awaiting_today=derived.is_awaiting_today,
            trailing_count=derived.trailing_count,
            favorites_count=derived.favorites_count,
            activity_level=derived.activity_level,
            days_in_app=self._days_in_app,
            window_label=self._classifier.window_label(ledger.window_key),
            loading=self._loading,
            loaded_at=self._loaded_at,
        )

    def subscribe(self, callback: StatsCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: StatsCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def notify_mutation(self, event: MutationEvent) -> None:
        """
        Handle an "item changed" signal.

        add/delete: ledger update, broadcast, invalidate, schedule refresh.
        edit: invalidate and schedule refresh only (cardinality unchanged).
        Everything before the refresh completes within this call.
        """
        self._require_scope("notify_mutation")

        if event.type in (MutationType.ADD, MutationType.DELETE) and event.item is None:
            raise ValidationError(f"Mutation '{event.type.value}' requires an item")

        logger.info(
            "Mutation %s%s for item %s",
            event.type.value,
            f" ({event.mode.value})" if event.type is MutationType.DELETE else "",
            event.item.item_id if event.item else "-",
        )

        if event.type is MutationType.ADD:
            self.ledger().apply_local_add(event.item)
            self._broadcast()
        elif event.type is MutationType.DELETE:
            self.ledger().apply_local_delete(event.item, event.mode)
            self._broadcast()

        self._cache.invalidate_all()
        self._schedule_refresh()

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    async def get_main_stats(self) -> AggregateSnapshot:
        scope = self._require_scope("get_main_stats")
        return await self._cache.get(
            f"mainStats:{scope}",
            lambda: self._provider.fetch_aggregate_snapshot(scope),
            self._settings.ttl_short_seconds,
        )

    async def get_item_list(self) -> list[Item]:
        scope = self._require_scope("get_item_list")
        return await self._cache.get(
            f"items:{scope}",
            lambda: self._provider.fetch_item_list(scope, self._settings.item_fetch_limit),
            self._settings.ttl_default_seconds,
        )

    async def get_derived_metrics(self) -> DerivedMetrics:
        """Recompute derived metrics from the (cached) authoritative item list."""
        items = await self.get_item_list()
        s = self._settings
        return compute_derived_metrics(
            items,
            self._classifier,
            favorite_window_days=s.favorite_window_days,
            trailing_window_days=s.trailing_window_days,
            activity_window_days=s.activity_window_days,
            activity_medium_threshold=s.activity_medium_threshold,
            activity_high_threshold=s.activity_high_threshold,
        )

    async def get_latest_items(self, limit: int = 3) -> list[Item]:
        """Most recent items, newest first."""
        scope = self._require_scope("get_latest_items")
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        self._latest_limits.add(limit)
        return await self._cache.get(
            f"latestItems_{limit}:{scope}",
            lambda: self._provider.fetch_item_list(scope, limit),
            self._settings.ttl_short_seconds,
        )

    def invalidate_for_scope(self, scope: str) -> None:
        """Drop every cached key belonging to `scope`."""
        keys = [f"mainStats:{scope}", f"items:{scope}"]
        keys.extend(f"latestItems_{limit}:{scope}" for limit in self._latest_limits)
        self._cache.invalidate(keys)

    # ------------------------------------------------------------------
    # Loading and refresh
    # ------------------------------------------------------------------

    async def load(self) -> EffectiveStats:
        """
        Initial visible load.

        Sets the loading flag while fetching and lets provider errors reach
        the caller, unlike the silent refresh.
        """
        self._require_scope("load")
        self._loading = True
        self._broadcast()
        try:
            await self._refresh()
        finally:
            self._loading = False
            self._broadcast()
        return self.get_effective_stats()

    async def refresh_silent(self) -> bool:
        """
        Re-fetch authoritative data without touching the loading flag.

        Returns False if the fetch failed; the displayed values are kept.
        """
        self._require_scope("refresh_silent")
        try:
            await self._refresh()
        except AppError:
            logger.warning("Silent refresh failed; keeping optimistic values", exc_info=True)
            return False
        self._broadcast()
        return True

    async def wait_for_refresh(self) -> None:
        """Wait until scheduled background refreshes have finished."""
        while self._refresh_task is not None and not self._refresh_task.done():
            await asyncio.shield(self._refresh_task)

    async def close(self) -> None:
        """Stop background work and drop subscribers and cached data."""
        task = self._refresh_task
        self._refresh_task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._subscribers.clear()
        self._cache.invalidate_all()

    async def _refresh(self) -> None:
        snapshot, derived = await asyncio.gather(self.get_main_stats(), self.get_derived_metrics())
        window_baseline = (
            snapshot.window_count if snapshot.window_count is not None else derived.window_count
        )
        self.ledger().reconcile(snapshot.total_count, window_baseline)
        self._derived = derived
        self._days_in_app = snapshot.days_in_app
        self._loaded_at = self._classifier.now()

    def _schedule_refresh(self) -> None:
        if self.is_refreshing:
            # Picked up by the running refresh loop once it completes
            self._refresh_again = True
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; refresh left to the next load")
            return
        self._refresh_again = False
        self._refresh_task = loop.create_task(self._run_refreshes())

    async def _run_refreshes(self) -> None:
        while True:
            self._refresh_again = False
            try:
                await self.refresh_silent()
            except Exception:
                logger.exception("Unexpected error during background refresh")
            if not self._refresh_again:
                break

    def _broadcast(self) -> None:
        stats = self.get_effective_stats()
        for callback in list(self._subscribers):
            try:
                callback(stats)
            except Exception:
                logger.warning("Stats subscriber %r failed", callback, exc_info=True)

    def _require_scope(self, operation: str) -> str:
        if not self._scope:
            raise MissingScopeError(operation)
        return self._scope
