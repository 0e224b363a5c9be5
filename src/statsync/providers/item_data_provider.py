"""Item-data provider protocol."""

from typing import Protocol

from statsync.domain.models import Item
from statsync.domain.views import AggregateSnapshot


class ItemDataProvider(Protocol):
    """
    Protocol for the remote source of authoritative item data.

    Implementations return canonical shapes only; response tolerance is
    handled once in `statsync.providers.normalization`. Failures are
    raised as ProviderError.
    """

    async def fetch_aggregate_snapshot(self, scope: str) -> AggregateSnapshot:
        """Fetch authoritative counts for a user scope."""
        ...

    async def fetch_item_list(self, scope: str, limit: int) -> list[Item]:
        """Fetch up to `limit` items for a user scope, newest first."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
