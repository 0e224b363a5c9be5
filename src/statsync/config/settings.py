"""Application settings and configuration."""

from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from statsync.domain.models.enums import Weekday


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Statistics Sync"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Cache freshness (seconds)
    ttl_short_seconds: float = 15.0
    ttl_default_seconds: float = 30.0

    # Calendar windows
    window_anchor: Weekday = Weekday.MONDAY
    business_timezone: str = "Europe/Moscow"

    # Derived metrics
    favorite_window_days: int = 30
    trailing_window_days: int = 30
    activity_window_days: int = 7
    activity_medium_threshold: int = 5
    activity_high_threshold: int = 15
    item_fetch_limit: int = 500

    ledger_family: str = "quotes"

    # Item-data provider (stub is used when no base URL is configured)
    api_base_url: Optional[str] = None
    api_timeout_seconds: float = 10.0
    api_retries: int = 3
    api_retry_delay_seconds: float = 1.0

    @field_validator(
        "ttl_short_seconds",
        "ttl_default_seconds",
        "api_timeout_seconds",
    )
    @classmethod
    def _positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator(
        "favorite_window_days",
        "trailing_window_days",
        "activity_window_days",
        "item_fetch_limit",
        "api_retries",
    )
    @classmethod
    def _positive_int(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @field_validator("window_anchor", mode="before")
    @classmethod
    def _normalize_anchor(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if self.activity_high_threshold < self.activity_medium_threshold:
            raise ValueError("activity_high_threshold must not be below activity_medium_threshold")
        return self


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
