"""Item and mutation event domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from statsync.domain.models.enums import DeleteMode, MutationType


@dataclass(frozen=True)
class Item:
    """
    A single user item as seen by the statistics layer.

    Only the fields that feed aggregates are kept: when it was created,
    its grouping key (author) and flags such as "favorite".
    """

    item_id: str
    timestamp: Optional[datetime] = None
    category: Optional[str] = None
    flags: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_favorite(self) -> bool:
        """Return True if the item is flagged as a favorite."""
        return "favorite" in self.flags


@dataclass(frozen=True)
class MutationEvent:
    """
    Signal that an item was added, deleted or edited.

    `mode` is only meaningful for deletes and defaults to OPTIMISTIC.
    """

    type: MutationType
    item: Optional[Item] = None
    mode: DeleteMode = DeleteMode.OPTIMISTIC

    def __post_init__(self) -> None:
        if isinstance(self.type, str):
            object.__setattr__(self, "type", MutationType(self.type))
        if isinstance(self.mode, str):
            object.__setattr__(self, "mode", DeleteMode(self.mode))
