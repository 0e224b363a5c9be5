"""Boundary normalization of upstream response shapes.

The remote API has shipped several field spellings over time. All of that
tolerance lives here; everything past this module sees only
AggregateSnapshot and Item.
"""

import logging
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from statsync.core.exceptions import ProviderError
from statsync.core.timezone import parse_timestamp
from statsync.domain.models import Item
from statsync.domain.views import AggregateSnapshot

logger = logging.getLogger(__name__)


class RawStats(BaseModel):
    """Stats payload as sent by any API revision."""

    model_config = ConfigDict(extra="ignore")

    total_count: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("totalQuotes", "totalCount", "total_count"),
    )
    window_count: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("weeklyQuotes", "windowCount", "thisWeek", "window_count"),
    )
    days_in_app: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("daysSinceRegistration", "daysInApp", "days_in_app"),
    )


class RawItem(BaseModel):
    """Item payload as sent by any API revision."""

    model_config = ConfigDict(extra="ignore")

    item_id: str = Field(validation_alias=AliasChoices("id", "_id", "item_id"))
    created: Any = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "dateAdded", "timestamp"),
    )
    category: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("author", "category"),
    )
    favorite: bool = Field(
        default=False,
        validation_alias=AliasChoices("isFavorite", "favorite"),
    )

    @field_validator("item_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if value is None or value == "":
            raise ValueError("item id is empty")
        return str(value)

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("favorite", mode="before")
    @classmethod
    def _coerce_favorite(cls, value: Any) -> bool:
        return bool(value)

    def to_item(self) -> Item:
        return Item(
            item_id=self.item_id,
            timestamp=parse_timestamp(self.created),
            category=self.category,
            flags=frozenset({"favorite"}) if self.favorite else frozenset(),
        )


def normalize_snapshot(payload: Any) -> AggregateSnapshot:
    """
    Convert a stats response into an AggregateSnapshot.

    Accepts the stats object either at the top level or under "stats".
    Raises ProviderError when the payload is not an object or has no total.
    """
    if isinstance(payload, dict) and isinstance(payload.get("stats"), dict):
        payload = payload["stats"]
    if not isinstance(payload, dict):
        raise ProviderError("fetch_aggregate_snapshot", "stats payload is not an object")

    try:
        raw = RawStats.model_validate(payload)
    except PydanticValidationError as exc:
        raise ProviderError("fetch_aggregate_snapshot", str(exc)) from exc

    if raw.total_count is None:
        raise ProviderError("fetch_aggregate_snapshot", "stats payload has no total count")

    return AggregateSnapshot(
        total_count=max(raw.total_count, 0),
        window_count=max(raw.window_count, 0) if raw.window_count is not None else None,
        days_in_app=raw.days_in_app or 0,
    )


def _extract_item_list(payload: Any) -> Optional[list]:
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return None
    for key in ("quotes", "items"):
        if isinstance(payload.get(key), list):
            return payload[key]
    data = payload.get("data")
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return _extract_item_list(data)
    return None


def normalize_items(payload: Any) -> list[Item]:
    """
    Convert an item list response into Items.

    Entries without an identifier are skipped; an unrecognized envelope
    raises ProviderError.
    """
    entries = _extract_item_list(payload)
    if entries is None:
        raise ProviderError("fetch_item_list", "item payload has no item list")

    items: list[Item] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            items.append(RawItem.model_validate(entry).to_item())
        except PydanticValidationError as exc:
            logger.debug("Skipping malformed item entry: %s", exc)
            continue
    return items
