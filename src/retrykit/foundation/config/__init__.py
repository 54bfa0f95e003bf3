"""Configuration: environment-driven defaults via pydantic-settings."""

from .settings import (
    MAX_WAIT,
    LoggingSettings,
    RetrykitSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "RetrykitSettings", "RetrySettings", "LoggingSettings",
    "get_settings", "clear_settings_cache", "MAX_WAIT",
]
