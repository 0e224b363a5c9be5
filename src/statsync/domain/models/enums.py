"""Enumerations for domain models."""

from enum import Enum


class MutationType(str, Enum):
    """Kinds of item change signals."""

    ADD = "add"
    DELETE = "delete"
    EDIT = "edit"


class DeleteMode(str, Enum):
    """Lifecycle stage of a local delete."""

    OPTIMISTIC = "optimistic"  # Applied before the server confirms
    CONFIRMED = "confirmed"  # Server accepted; next refresh absorbs it
    REVERTED = "reverted"  # Server rejected an optimistic delete


class ActivityLevel(str, Enum):
    """Coarse activity rating over a trailing window."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Weekday(str, Enum):
    """Day of week that starts an aggregation window."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def index(self) -> int:
        """Return the weekday number as used by date.weekday() (Monday == 0)."""
        return list(Weekday).index(self)
