"""Domain layer - pure business models with no external dependencies."""

from statsync.domain.models import (
    Item,
    MutationEvent,
    MutationType,
    DeleteMode,
    ActivityLevel,
    Weekday,
)

__all__ = [
    "Item",
    "MutationEvent",
    "MutationType",
    "DeleteMode",
    "ActivityLevel",
    "Weekday",
]
