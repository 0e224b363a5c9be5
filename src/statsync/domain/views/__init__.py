"""View models for service outputs."""

from statsync.domain.views.stats import (
    AggregateSnapshot,
    DerivedMetrics,
    EffectiveStats,
)

__all__ = [
    "AggregateSnapshot",
    "DerivedMetrics",
    "EffectiveStats",
]
