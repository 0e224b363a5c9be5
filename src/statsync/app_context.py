"""Application context for in-process service management.

Owns the provider for the lifetime of the application and a fresh
StatisticsService (ledger, cache, subscribers) per user session. Whatever
composes the application creates one context and passes it where needed;
there is no module-level instance.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

import pytz

from statsync.config.settings import Settings, get_settings
from statsync.core.exceptions import MissingScopeError, ValidationError
from statsync.providers import HttpItemDataProvider, ItemDataProvider, StubItemDataProvider
from statsync.services import ReadThroughCache, StatisticsService, WindowClassifier

logger = logging.getLogger(__name__)


class AppContext:
    """
    Composition root for the statistics core.

    start_session() builds the per-user service; end_session() stops its
    background work and discards its state.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[ItemDataProvider] = None,
        clock: Optional[Callable[[], datetime]] = None,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize application context.

        Args:
            settings: Configuration; defaults to the process settings.
            provider: Item-data provider; built from settings if omitted.
            clock: Wall clock for calendar decisions (tests pin this).
            monotonic: Clock used for cache freshness.
        """
        self._settings = settings or get_settings()
        self._monotonic = monotonic
        self._classifier = WindowClassifier(
            anchor=self._settings.window_anchor,
            tz=pytz.timezone(self._settings.business_timezone),
            clock=clock,
        )
        self._provider = provider or self._build_provider()
        self._service: Optional[StatisticsService] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def provider(self) -> ItemDataProvider:
        return self._provider

    @property
    def classifier(self) -> WindowClassifier:
        return self._classifier

    @property
    def has_session(self) -> bool:
        return self._service is not None

    @property
    def stats(self) -> StatisticsService:
        """Get the StatisticsService of the active session."""
        if self._service is None:
            raise MissingScopeError("stats")
        return self._service

    async def start_session(self, user_id: str) -> StatisticsService:
        """Start a session for `user_id`, replacing any active one."""
        if not user_id or not user_id.strip():
            raise ValidationError("user_id must not be empty")
        if self._service is not None:
            await self.end_session()

        cache = ReadThroughCache(
            default_ttl_seconds=self._settings.ttl_default_seconds,
            clock=self._monotonic,
        )
        self._service = StatisticsService(
            provider=self._provider,
            cache=cache,
            classifier=self._classifier,
            scope=user_id.strip(),
            settings=self._settings,
        )
        logger.info("Started stats session for user %s", user_id)
        return self._service

    async def end_session(self) -> None:
        """End the active session, if any."""
        if self._service is None:
            return
        service, self._service = self._service, None
        await service.close()
        logger.info("Ended stats session for user %s", service.scope)

    async def close(self) -> None:
        """Clean up resources."""
        await self.end_session()
        await self._provider.aclose()

    def _build_provider(self) -> ItemDataProvider:
        settings = self._settings
        if settings.api_base_url:
            return HttpItemDataProvider(
                base_url=settings.api_base_url,
                timeout_seconds=settings.api_timeout_seconds,
                retries=settings.api_retries,
                retry_delay_seconds=settings.api_retry_delay_seconds,
            )
        logger.info("No api_base_url configured; using in-memory stub provider")
        return StubItemDataProvider(window_classifier=self._classifier)
