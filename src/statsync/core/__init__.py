"""Core utilities and shared functionality."""

from statsync.core.timezone import (
    get_business_tz,
    now_local,
    to_local,
    local_date,
    parse_timestamp,
)
from statsync.core.exceptions import (
    AppError,
    ValidationError,
    MissingScopeError,
    ProviderError,
)

__all__ = [
    "get_business_tz",
    "now_local",
    "to_local",
    "local_date",
    "parse_timestamp",
    "AppError",
    "ValidationError",
    "MissingScopeError",
    "ProviderError",
]
