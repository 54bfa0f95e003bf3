"""Retry execution with pluggable delay policies.

Example:
    >>> from retrykit.runtime.retry import do, with_attempts, with_delay, backoff_delay, set_backoff_base
    >>>
    >>> def fetch() -> bytes:
    ...     return http_get("https://example.com")
    >>>
    >>> body = do(fetch, with_attempts(5), with_delay(backoff_delay, set_backoff_base(0.2)))
"""

from .backoff import (
    BACKOFF_UNIT,
    DelayFn,
    backoff_delay,
    capped,
    combine,
    fixed_delay,
    no_delay,
    random_delay,
)
from .executor import do, do_async, retry
from .policy import (
    UNBOUNDED,
    DelayOption,
    OnRetryFn,
    Option,
    RetryConfig,
    RetryIfFn,
    default_on_retry,
    default_retry_if,
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

__all__ = [
    # Delay policies
    "DelayFn", "no_delay", "fixed_delay", "random_delay", "backoff_delay", "combine", "capped", "BACKOFF_UNIT",
    # Configuration
    "RetryConfig", "Option", "DelayOption", "RetryIfFn", "OnRetryFn", "UNBOUNDED",
    "default_retry_if", "default_on_retry",
    "with_attempts", "with_retry_if", "with_on_retry", "with_delay", "with_context",
    "with_last_error_only", "with_name",
    "set_fixed_delay", "set_random_delay", "set_backoff_base", "set_max_delay",
    # Execution
    "do", "do_async", "retry",
]
