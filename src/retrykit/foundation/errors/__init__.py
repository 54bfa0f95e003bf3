"""Error types for retrykit.

- Unrecoverable: marker that stops retrying, with mark/is/unwrap helpers
- RetryError: aggregate of per-attempt errors with chain inspection
- ContextError/Cancelled/DeadlineExceeded: reported by a finished CancelScope
"""

from .errors import (
    Cancelled,
    ContextError,
    DeadlineExceeded,
    RetryError,
    Unrecoverable,
    chain_contains,
    chain_find,
    is_unrecoverable,
    iter_causes,
    mark_unrecoverable,
    unwrap_unrecoverable,
)

__all__ = [
    # Classification
    "Unrecoverable", "mark_unrecoverable", "is_unrecoverable", "unwrap_unrecoverable",
    # Aggregate
    "RetryError",
    # Cancellation
    "ContextError", "Cancelled", "DeadlineExceeded",
    # Chain inspection
    "iter_causes", "chain_contains", "chain_find",
]
