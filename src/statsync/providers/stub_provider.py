"""Stub item-data provider for offline/testing use."""

import asyncio
from typing import TYPE_CHECKING, Iterable, Optional

from statsync.core.exceptions import ProviderError
from statsync.domain.models import Item
from statsync.domain.views import AggregateSnapshot

if TYPE_CHECKING:
    from statsync.services.window_classifier import WindowClassifier


class StubItemDataProvider:
    """
    In-memory provider that plays the role of the remote service.

    Items are kept per scope; snapshots are computed from the stored items
    so the stub is always "authoritative" for whatever it holds. A window
    classifier, when given, makes snapshots report the current-window count.
    """

    def __init__(
        self,
        items: Optional[dict[str, list[Item]]] = None,
        window_classifier: Optional["WindowClassifier"] = None,
        delay_seconds: float = 0.0,
        days_in_app: int = 0,
    ):
        self._items: dict[str, list[Item]] = {k: list(v) for k, v in (items or {}).items()}
        self._classifier = window_classifier
        self.delay_seconds = delay_seconds
        self.days_in_app = days_in_app
        self.failing = False
        self.snapshot_calls = 0
        self.item_list_calls = 0

    # Store manipulation (what the server would do on write requests)
    def add_item(self, scope: str, item: Item) -> None:
        self._items.setdefault(scope, []).append(item)

    def add_items(self, scope: str, items: Iterable[Item]) -> None:
        for item in items:
            self.add_item(scope, item)

    def delete_item(self, scope: str, item_id: str) -> None:
        self._items[scope] = [i for i in self._items.get(scope, []) if i.item_id != item_id]

    def replace_item(self, scope: str, item: Item) -> None:
        self._items[scope] = [
            item if existing.item_id == item.item_id else existing
            for existing in self._items.get(scope, [])
        ]

    def items_for(self, scope: str) -> list[Item]:
        return list(self._items.get(scope, []))

    async def fetch_aggregate_snapshot(self, scope: str) -> AggregateSnapshot:
        self.snapshot_calls += 1
        await self._simulate_network("fetch_aggregate_snapshot")
        items = self._items.get(scope, [])
        window_count = None
        if self._classifier is not None:
            window_count = sum(
                1 for item in items
                if item.timestamp is not None and self._classifier.is_current(item.timestamp)
            )
        return AggregateSnapshot(
            total_count=len(items),
            window_count=window_count,
            days_in_app=self.days_in_app,
        )

    async def fetch_item_list(self, scope: str, limit: int) -> list[Item]:
        self.item_list_calls += 1
        await self._simulate_network("fetch_item_list")
        stored = self._items.get(scope, [])
        # Newest first; undated items go last in insertion order
        dated = sorted(
            (i for i in stored if i.timestamp is not None),
            key=lambda i: i.timestamp,
            reverse=True,
        )
        undated = [i for i in stored if i.timestamp is None]
        return (dated + undated)[:limit]

    async def aclose(self) -> None:
        return None

    async def _simulate_network(self, operation: str) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.failing:
            raise ProviderError(operation, "stub provider is failing")
