"""Read-through cache with TTL and in-flight request deduplication."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    """Cached value with the clock reading at which it was stored."""

    key: str
    value: Any
    stored_at: float


class ReadThroughCache:
    """
    Maps request keys to loaded values for a limited time.

    - A valid entry is returned without calling the loader.
    - Concurrent misses for one key share a single loader call.
    - Failed loads are not cached; the error reaches every waiting caller.

    Entries are judged against the TTL given at read time, so one key can
    be read with different freshness requirements. Runs on a single event
    loop; no locking.
    """

    def __init__(
        self,
        default_ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        self.loads = 0

    def peek(self, key: str, ttl: Optional[float] = None) -> Optional[Any]:
        """Return the cached value for `key` if still valid, without loading."""
        entry = self._valid_entry(key, self._default_ttl if ttl is None else ttl)
        return entry.value if entry else None

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    async def get(self, key: str, loader: Loader, ttl: Optional[float] = None) -> Any:
        """
        Return the value for `key`, loading it through `loader` on a miss.

        Cancelling one waiting caller does not cancel the shared load.
        """
        ttl = self._default_ttl if ttl is None else ttl

        entry = self._valid_entry(key, ttl)
        if entry is not None:
            logger.debug("Cache hit: %s", key)
            return entry.value

        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight load: %s", key)
            return await asyncio.shield(pending)

        logger.debug("Cache miss: %s", key)
        task = asyncio.ensure_future(self._load(key, loader))
        self._in_flight[key] = task
        return await asyncio.shield(task)

    def invalidate(self, keys: Iterable[str]) -> None:
        """Drop entries and in-flight markers for specific keys."""
        for key in keys:
            self._entries.pop(key, None)
            self._in_flight.pop(key, None)

    def invalidate_all(self) -> None:
        """Drop every entry and in-flight marker."""
        logger.debug("Invalidating all cache entries (%d stored)", len(self._entries))
        self._entries.clear()
        self._in_flight.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    async def _load(self, key: str, loader: Loader) -> Any:
        task = asyncio.current_task()
        self.loads += 1
        try:
            value = await loader()
        except BaseException:
            if self._in_flight.get(key) is task:
                del self._in_flight[key]
            raise

        # A load that was invalidated while running still answers its
        # waiters but must not repopulate the cache.
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
            self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())
        return value

    def _valid_entry(self, key: str, ttl: float) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at < ttl:
            return entry
        return None
