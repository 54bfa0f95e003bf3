"""Delay policies for retry attempts.

Each policy maps (attempt, last error, config) to a wait in seconds:
- no_delay: Retry immediately (default)
- fixed_delay: Constant delay from config.fixed_delay
- random_delay: Uniform in [0, config.random_delay)
- backoff_delay: Doubling delay starting from config.backoff_base
- combine: Sum of several policies, e.g. fixed + random jitter

Policies read their parameters from the config, so the same function can
be reused across calls with different settings. The ceiling
(config.max_delay) is applied by capped(), not by the policies.
"""

from __future__ import annotations

import math
import random
from functools import wraps
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from retrykit.foundation.config import MAX_WAIT

if TYPE_CHECKING:
    from .policy import RetryConfig

# Smallest backoff step, used when no base delay is configured
BACKOFF_UNIT: float = 0.001


@runtime_checkable
class DelayFn(Protocol):
    """Protocol for delay calculation.

    Attempt numbers are 0-indexed (first failure = attempt 0).
    """

    def __call__(self, attempt: int, error: BaseException, config: RetryConfig) -> float: ...


def no_delay(attempt: int, error: BaseException, config: RetryConfig) -> float:
    """Retry immediately."""
    return 0.0


def fixed_delay(attempt: int, error: BaseException, config: RetryConfig) -> float:
    """Wait config.fixed_delay seconds before every retry."""
    return config.fixed_delay


def random_delay(attempt: int, error: BaseException, config: RetryConfig) -> float:
    """Wait a uniform random time in [0, config.random_delay)."""
    bound = config.random_delay
    return random.random() * bound if bound > 0 else 0.0


def backoff_exponent_cap(base: float) -> int:
    """Largest doubling count that keeps base * 2**n within MAX_WAIT."""
    return max(0, math.floor(math.log2(MAX_WAIT / base)))


def backoff_delay(attempt: int, error: BaseException, config: RetryConfig) -> float:
    """Exponential backoff: base * 2**attempt, doubling stops at the cached cap.

    Delay = backoff_base * 2 ** min(attempt, cap)

    An unset base becomes BACKOFF_UNIT on the config itself.
    """
    if config.backoff_base <= 0:
        config.backoff_base = BACKOFF_UNIT
    return config.backoff_base * (1 << min(attempt, config.backoff_cap()))


def combine(*fns: DelayFn) -> DelayFn:
    """Sum the delays of several policies for the same attempt.

    Example:
        >>> # Fixed 1s plus up to 0.5s of jitter
        >>> do(op, with_delay(combine(fixed_delay, random_delay),
        ...                   set_fixed_delay(1.0), set_random_delay(0.5)))
    """
    def combined(attempt: int, error: BaseException, config: RetryConfig) -> float:
        return sum((fn(attempt, error, config) for fn in fns), 0.0)
    return combined


def capped(fn: DelayFn) -> DelayFn:
    """Clamp fn's result to config.max_delay, read at call time."""
    @wraps(fn)
    def wrapper(attempt: int, error: BaseException, config: RetryConfig) -> float:
        return min(fn(attempt, error, config), config.max_delay)
    return wrapper
