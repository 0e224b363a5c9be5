"""HTTP item-data provider backed by httpx."""

import asyncio
import logging
from typing import Any, Optional

import httpx

from statsync.core.exceptions import ProviderError
from statsync.domain.models import Item
from statsync.domain.views import AggregateSnapshot
from statsync.providers.normalization import normalize_items, normalize_snapshot

logger = logging.getLogger(__name__)


class HttpItemDataProvider:
    """
    Provider that reads authoritative stats and items from the reader API.

    Endpoints (relative to base_url):
    - GET /stats?userId=...
    - GET /quotes?limit=...&userId=...

    Transport errors, 5xx responses and unreadable bodies are retried with
    a linear back-off, then raised as ProviderError. A 4xx response is
    raised at once.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        retries: int = 3,
        retry_delay_seconds: float = 1.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._retries = max(retries, 1)
        self._retry_delay = retry_delay_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
        )

    async def fetch_aggregate_snapshot(self, scope: str) -> AggregateSnapshot:
        payload = await self._get_json("/stats", {"userId": scope})
        return normalize_snapshot(payload)

    async def fetch_item_list(self, scope: str, limit: int) -> list[Item]:
        payload = await self._get_json("/quotes", {"limit": limit, "userId": scope})
        return normalize_items(payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        last_error: Optional[Exception] = None
        for attempt in range(1, self._retries + 1):
            try:
                response = await self._client.get(path, params=params)
                response.raise_for_status()
                return response.json()
            except (httpx.HTTPError, ValueError) as exc:
                if isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code < 500:
                    raise ProviderError(f"GET {path}", str(exc)) from exc
                last_error = exc
                logger.debug("GET %s failed (attempt %d/%d): %s", path, attempt, self._retries, exc)
                if attempt < self._retries:
                    await asyncio.sleep(self._retry_delay * attempt)

        raise ProviderError(f"GET {path}", str(last_error)) from last_error
