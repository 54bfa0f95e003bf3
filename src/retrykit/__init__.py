"""retrykit - retry fallible operations with composable policies.

Calls an operation repeatedly until it succeeds, runs out of attempts, is
told to stop, or is cancelled. Delays between attempts are computed by
plain functions (fixed, random, exponential backoff, or sums of these) and
clamped to a ceiling.

Quick Start:
    >>> from retrykit import do, with_attempts, with_delay, fixed_delay, set_fixed_delay
    >>>
    >>> value = do(
    ...     lambda: client.get("/status"),
    ...     with_attempts(3),
    ...     with_delay(fixed_delay, set_fixed_delay(0.5)),
    ... )

Stopping early:
    >>> from retrykit import Unrecoverable
    >>> def op():
    ...     raise Unrecoverable(PermissionError("denied"))   # no further attempts

Cancellation:
    >>> from retrykit import CancelScope, with_context
    >>> scope = CancelScope(timeout=10.0)
    >>> do(op, with_context(scope))   # raises DeadlineExceeded once 10s have passed

Failure reporting:
    >>> try:
    ...     do(op, with_attempts(3))
    ... except RetryError as e:
    ...     print(e)
    retry failed after 3 attempts:
    # 0: boom
    # 1: boom
    # 2: boom

Decorator:
    >>> @retry(with_attempts(5), with_delay(backoff_delay, set_backoff_base(0.1)))
    ... async def fetch(url: str) -> bytes: ...
"""

from __future__ import annotations

from .foundation import (
    Cancelled,
    ContextError,
    DeadlineExceeded,
    JsonFormatter,
    LoggingSettings,
    RetryError,
    RetrykitSettings,
    RetrySettings,
    Unrecoverable,
    clear_settings_cache,
    configure_logging,
    get_settings,
    is_unrecoverable,
    mark_unrecoverable,
    unwrap_unrecoverable,
)
from .runtime.concurrency import CancelScope
from .runtime.retry import (
    BACKOFF_UNIT,
    UNBOUNDED,
    DelayFn,
    DelayOption,
    OnRetryFn,
    Option,
    RetryConfig,
    RetryIfFn,
    backoff_delay,
    combine,
    default_on_retry,
    default_retry_if,
    do,
    do_async,
    fixed_delay,
    no_delay,
    random_delay,
    retry,
    set_backoff_base,
    set_fixed_delay,
    set_max_delay,
    set_random_delay,
    with_attempts,
    with_context,
    with_delay,
    with_last_error_only,
    with_name,
    with_on_retry,
    with_retry_if,
)

__version__ = "0.1.0"

__all__ = [
    # Execution
    "do", "do_async", "retry",
    # Configuration
    "RetryConfig", "Option", "DelayOption", "RetryIfFn", "OnRetryFn", "UNBOUNDED",
    "default_retry_if", "default_on_retry",
    "with_attempts", "with_retry_if", "with_on_retry", "with_delay", "with_context",
    "with_last_error_only", "with_name",
    "set_fixed_delay", "set_random_delay", "set_backoff_base", "set_max_delay",
    # Delay policies
    "DelayFn", "no_delay", "fixed_delay", "random_delay", "backoff_delay", "combine", "BACKOFF_UNIT",
    # Errors
    "Unrecoverable", "mark_unrecoverable", "is_unrecoverable", "unwrap_unrecoverable",
    "RetryError", "ContextError", "Cancelled", "DeadlineExceeded",
    # Cancellation
    "CancelScope",
    # Settings & logging
    "RetrykitSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
    "configure_logging", "JsonFormatter",
]
