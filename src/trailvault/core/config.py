# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from trailvault.core.constants import (
    DEFAULT_TOP_N,
    SUPPORTED_WEEK_NUMBERING,
    StoreBackend,
    TimestampFallback,
)
from trailvault.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TRAILVAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Monitored resource (bucket name)
    monitored_resource: str = ""

    # Archive store
    store_backend: str = "sqlite"  # "sqlite" or "memory"
    db_path: Path = Path("trailvault.db")

    # Archive partitioning
    week_numbering: str = "iso"
    timestamp_fallback: str = TimestampFallback.CURRENT_WEEK.value

    # Summary
    summary_top_n: int = DEFAULT_TOP_N

    # Merge retries
    merge_max_conflict_retries: int = 5
    store_max_attempts: int = 3
    store_backoff_base: float = 0.2  # seconds: 0.2, 0.4, 0.8

    # Whole-batch deadline in seconds, 0 disables it
    batch_deadline_seconds: float = 270.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


def get_settings() -> Settings:
    return Settings()


def validate_settings(settings: Settings) -> Settings:
    """Check settings once at startup.

    Raises:
        ConfigurationError: If any value would make ingestion unsafe or
            ambiguous (no monitored resource, unknown week numbering, ...).
    """
    if not settings.monitored_resource.strip():
        raise ConfigurationError(
            "No monitored resource configured. Set TRAILVAULT_MONITORED_RESOURCE."
        )
    if settings.week_numbering.lower() not in SUPPORTED_WEEK_NUMBERING:
        msg = (
            f"Unsupported week numbering {settings.week_numbering!r}. "
            f"Expected one of: {', '.join(sorted(SUPPORTED_WEEK_NUMBERING))}."
        )
        raise ConfigurationError(msg)
    if settings.timestamp_fallback not in {f.value for f in TimestampFallback}:
        msg = (
            f"Unknown timestamp fallback {settings.timestamp_fallback!r}. "
            "Expected 'current_week' or 'reject'."
        )
        raise ConfigurationError(msg)
    if settings.store_backend.lower() not in {b.value for b in StoreBackend}:
        msg = (
            f"Unknown archive store backend: {settings.store_backend!r}. "
            "Expected 'sqlite' or 'memory'."
        )
        raise ConfigurationError(msg)
    if settings.summary_top_n < 1:
        raise ConfigurationError("summary_top_n must be at least 1")
    if settings.merge_max_conflict_retries < 0:
        raise ConfigurationError("merge_max_conflict_retries must not be negative")
    if settings.store_max_attempts < 1:
        raise ConfigurationError("store_max_attempts must be at least 1")
    if settings.store_backoff_base < 0 or settings.batch_deadline_seconds < 0:
        raise ConfigurationError("Backoff and deadline values must not be negative")
    return settings
