"""Foundation - building blocks shared by the retry runtime.

Contains: error types, settings, logging setup.
"""

from __future__ import annotations

from .config import LoggingSettings, RetrykitSettings, RetrySettings, clear_settings_cache, get_settings
from .errors import (
    Cancelled,
    ContextError,
    DeadlineExceeded,
    RetryError,
    Unrecoverable,
    is_unrecoverable,
    mark_unrecoverable,
    unwrap_unrecoverable,
)
from .logging import JsonFormatter, configure_logging

__all__ = [
    # Errors
    "Unrecoverable", "mark_unrecoverable", "is_unrecoverable", "unwrap_unrecoverable",
    "RetryError", "ContextError", "Cancelled", "DeadlineExceeded",
    # Config
    "RetrykitSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
    # Logging
    "configure_logging", "JsonFormatter",
]
