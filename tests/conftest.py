"""
Pytest configuration and fixtures for statistics sync tests.

This module provides:
- Pinned wall clock and monotonic clock helpers
- Settings isolated from the environment
- Item factories on calendar days relative to a fixed "now"
- Stub and failing item-data providers
- Service, context and API client fixtures
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

import pytest
import pytz
from fastapi.testclient import TestClient

from statsync.app_context import AppContext
from statsync.config.settings import Settings, set_settings, reset_settings
from statsync.core.exceptions import ProviderError
from statsync.domain.models import Item, Weekday
from statsync.domain.views import AggregateSnapshot
from statsync.main import create_app
from statsync.providers import StubItemDataProvider
from statsync.services import ReadThroughCache, StatisticsService, WindowClassifier


BUSINESS_TZ = pytz.timezone("Europe/Moscow")
SCOPE = "user-123"


# =============================================================================
# TIME HELPERS
# =============================================================================


def local_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in the business timezone."""
    return BUSINESS_TZ.localize(datetime(year, month, day, hour, minute, second))


class FixedClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class ManualMonotonic:
    """Monotonic clock for cache TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now': Wednesday 2024-06-12 14:30 in the business timezone."""
    return local_datetime(2024, 6, 12, 14, 30, 0)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def monotonic() -> ManualMonotonic:
    return ManualMonotonic()


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture(autouse=True)
def settings() -> Settings:
    """Settings isolated from environment files, installed globally for the test."""
    test_settings = Settings(
        _env_file=None,
        business_timezone="Europe/Moscow",
        window_anchor=Weekday.MONDAY,
        api_base_url=None,
    )
    set_settings(test_settings)
    yield test_settings
    reset_settings()


# =============================================================================
# ITEM FACTORIES
# =============================================================================


@pytest.fixture
def item_factory(fixed_now) -> Callable[..., Item]:
    """Factory for items placed `days_ago` calendar days before fixed_now."""
    counter = {"n": 0}

    def _create_item(
        days_ago: int = 0,
        hour: int = 10,
        category: Optional[str] = None,
        favorite: bool = False,
        item_id: Optional[str] = None,
    ) -> Item:
        counter["n"] += 1
        day = (fixed_now - timedelta(days=days_ago)).date()
        return Item(
            item_id=item_id or f"item-{counter['n']}",
            timestamp=local_datetime(day.year, day.month, day.day, hour),
            category=category,
            flags=frozenset({"favorite"}) if favorite else frozenset(),
        )

    return _create_item


# =============================================================================
# PROVIDERS
# =============================================================================


class FailingItemDataProvider:
    """Provider that always raises ProviderError."""

    def __init__(self):
        self.calls = 0

    async def fetch_aggregate_snapshot(self, scope: str) -> AggregateSnapshot:
        self.calls += 1
        raise ProviderError("fetch_aggregate_snapshot", "network unavailable")

    async def fetch_item_list(self, scope: str, limit: int) -> list[Item]:
        self.calls += 1
        raise ProviderError("fetch_item_list", "network unavailable")

    async def aclose(self) -> None:
        return None


@pytest.fixture
def classifier(clock) -> WindowClassifier:
    return WindowClassifier(anchor=Weekday.MONDAY, tz=BUSINESS_TZ, clock=clock)


@pytest.fixture
def stub_provider(classifier) -> StubItemDataProvider:
    """Stub provider reporting window counts for the pinned clock."""
    return StubItemDataProvider(window_classifier=classifier)


@pytest.fixture
def failing_provider() -> FailingItemDataProvider:
    return FailingItemDataProvider()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def cache(monotonic, settings) -> ReadThroughCache:
    return ReadThroughCache(default_ttl_seconds=settings.ttl_default_seconds, clock=monotonic)


@pytest.fixture
def stats_service(stub_provider, cache, classifier, settings) -> StatisticsService:
    """Provide a StatisticsService bound to SCOPE over the stub provider."""
    return StatisticsService(
        provider=stub_provider,
        cache=cache,
        classifier=classifier,
        scope=SCOPE,
        settings=settings,
    )


@pytest.fixture
def app_context(settings, stub_provider, clock, monotonic) -> AppContext:
    return AppContext(settings=settings, provider=stub_provider, clock=clock, monotonic=monotonic)


@pytest.fixture
def client(app_context) -> TestClient:
    """Provide FastAPI test client around a context with the stub provider."""
    app = create_app(context=app_context)
    with TestClient(app) as c:
        yield c


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


class StatsRecorder:
    """Subscriber that records every broadcast."""

    def __init__(self):
        self.calls = []

    def __call__(self, stats) -> None:
        self.calls.append(stats)

    @property
    def last(self):
        return self.calls[-1] if self.calls else None
