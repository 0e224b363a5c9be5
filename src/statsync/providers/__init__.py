"""Item-data providers module."""

from statsync.providers.item_data_provider import ItemDataProvider
from statsync.providers.http_provider import HttpItemDataProvider
from statsync.providers.stub_provider import StubItemDataProvider

__all__ = [
    "ItemDataProvider",
    "HttpItemDataProvider",
    "StubItemDataProvider",
]
