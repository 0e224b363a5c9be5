"""Domain models package."""

from statsync.domain.models.enums import MutationType, DeleteMode, ActivityLevel, Weekday
from statsync.domain.models.item import Item, MutationEvent

__all__ = [
    "MutationType",
    "DeleteMode",
    "ActivityLevel",
    "Weekday",
    "Item",
    "MutationEvent",
]
