"""Environment-based configuration using pydantic-settings.

Provides the defaults every RetryConfig starts from, validated and
overridable through environment variables or a .env file.

Example:
    >>> from retrykit.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.attempts
    10
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # RETRYKIT_RETRY_ATTEMPTS=5
    # RETRYKIT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import threading
from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeFloat, NonNegativeInt, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Longest wait the platform's blocking primitives accept
MAX_WAIT: float = threading.TIMEOUT_MAX


class RetrySettings(BaseSettings):
    """Default retry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYKIT_RETRY_",
        extra="ignore",
    )

    attempts: NonNegativeInt = Field(default=10, description="Attempt budget per call")
    random_delay: NonNegativeFloat = Field(default=0.1, description="Upper bound of random delay in seconds")
    backoff_base: NonNegativeFloat = Field(default=0.0, description="Initial backoff delay (0 = one time unit)")
    max_delay: PositiveFloat = Field(default=MAX_WAIT, description="Ceiling for any single delay in seconds")

    @field_validator("max_delay")
    @classmethod
    def _clamp_max_delay(cls, v: float) -> float:
        """Cap at what threading and asyncio can actually wait for."""
        return min(v, MAX_WAIT)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYKIT_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"
    include_timestamps: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RetrykitSettings(BaseSettings):
    """Root settings for retrykit.

    Loads configuration from environment variables with RETRYKIT_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        RETRYKIT_RETRY_ATTEMPTS=3
        RETRYKIT_RETRY_MAX_DELAY=30
        RETRYKIT_LOG_LEVEL=DEBUG
        RETRYKIT_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetrykitSettings:
    """Get the global settings instance (cached)."""
    return RetrykitSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
