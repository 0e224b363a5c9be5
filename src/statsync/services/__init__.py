"""Service layer - business logic orchestration."""

from statsync.services.window_classifier import WindowClassifier
from statsync.services.read_through_cache import ReadThroughCache, CacheEntry
from statsync.services.reconciliation import PendingCounts, absorb
from statsync.services.aggregate_ledger import AggregateLedger
from statsync.services.statistics_service import StatisticsService

__all__ = [
    "WindowClassifier",
    "ReadThroughCache",
    "CacheEntry",
    "PendingCounts",
    "absorb",
    "AggregateLedger",
    "StatisticsService",
]
