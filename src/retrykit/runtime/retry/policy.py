"""Retry configuration and the options that build it.

A RetryConfig is created fresh for every executor call: defaults come from
RetrySettings, then each option is applied in the order given. Later options
win where they set the same field. Assignments are validated, so a bad value
fails at option time with a pydantic ValidationError.

Example:
    >>> config = RetryConfig.from_options(
    ...     with_attempts(5),
    ...     with_delay(backoff_delay, set_backoff_base(0.2), set_max_delay(10.0)),
    ...     with_last_error_only(),
    ... )
"""

from __future__ import annotations

from typing import Annotated, Any, Callable

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, NonNegativeFloat, PrivateAttr, field_validator

from retrykit.foundation.config import MAX_WAIT, get_settings
from retrykit.foundation.errors import is_unrecoverable
from retrykit.runtime.concurrency import CancelScope

from .backoff import BACKOFF_UNIT, DelayFn, backoff_exponent_cap, capped, no_delay

RetryIfFn = Callable[[int, BaseException], bool]
OnRetryFn = Callable[[int, BaseException], None]
Option = Callable[["RetryConfig"], None]
DelayOption = Callable[["RetryConfig"], None]

# Attempt budget meaning "retry until success, stop or cancellation".
# Every failure is kept unless with_last_error_only() is set, so a long
# unbounded run holds one error per attempt.
UNBOUNDED = None


def default_retry_if(attempt: int, error: BaseException) -> bool:
    """Keep retrying unless the error carries the unrecoverable marker."""
    return not is_unrecoverable(error)


def default_on_retry(attempt: int, error: BaseException) -> None:
    pass


def _retry_defaults() -> Any:
    return get_settings().retry


class RetryConfig(BaseModel):
    """Knobs for a single executor call.

    Attributes:
        attempts: Attempt budget; 0 = no-op, None = unbounded
        retry_if: Predicate (attempt, raw error) deciding whether to continue
        on_retry: Callback (attempt, raw error) run before each retry
        delay_fn: Delay policy (attempt, raw error, config) -> seconds
        fixed_delay: Parameter for fixed_delay
        random_delay: Upper bound for random_delay
        backoff_base: Initial delay for backoff_delay (0 = BACKOFF_UNIT)
        max_delay: Ceiling applied by with_delay
        last_error_only: Keep only the latest error instead of all of them
        context: Cancellation scope checked at entry and between attempts
        name: Label used in log messages (default: the operation's name)
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra="forbid",
    )

    attempts: Annotated[int, Field(ge=0)] | None = Field(default_factory=lambda: _retry_defaults().attempts)
    retry_if: RetryIfFn = Field(default=default_retry_if, repr=False)
    on_retry: OnRetryFn = Field(default=default_on_retry, repr=False)
    delay_fn: Callable[[int, BaseException, Any], float] = Field(default=no_delay, repr=False)
    fixed_delay: NonNegativeFloat = 0.0
    random_delay: NonNegativeFloat = Field(default_factory=lambda: _retry_defaults().random_delay)
    backoff_base: NonNegativeFloat = Field(default_factory=lambda: _retry_defaults().backoff_base)
    max_delay: NonNegativeFloat = Field(default_factory=lambda: _retry_defaults().max_delay)
    last_error_only: bool = False
    context: InstanceOf[CancelScope] = Field(default_factory=CancelScope, repr=False)
    name: str | None = None

    # Scratch state for backoff_delay, computed on first use
    _backoff_cap: int | None = PrivateAttr(default=None)

    @field_validator("max_delay")
    @classmethod
    def _clamp_max_delay(cls, v: float) -> float:
        return min(v, MAX_WAIT)

    @classmethod
    def from_options(cls, *options: Option) -> RetryConfig:
        """Build a config from settings defaults and the given options, in order."""
        config = cls()
        for opt in options:
            opt(config)
        return config

    @property
    def is_disabled(self) -> bool:
        """Whether a call with this config returns without running the operation."""
        return self.attempts == 0

    @property
    def is_unbounded(self) -> bool:
        return self.attempts is None

    def is_last_attempt(self, attempt: int) -> bool:
        return self.attempts is not None and attempt >= self.attempts - 1

    def backoff_cap(self) -> int:
        """Max doubling count for backoff_delay, derived once from backoff_base."""
        if self._backoff_cap is None:
            self._backoff_cap = backoff_exponent_cap(self.backoff_base or BACKOFF_UNIT)
        return self._backoff_cap


# ─────────────────────────────────────────────────────────────────────────────
# Options
# ─────────────────────────────────────────────────────────────────────────────


def with_attempts(attempts: int | None) -> Option:
    """Set the attempt budget. UNBOUNDED (None) retries until stopped; 0 is a no-op.

    Unbounded runs collect one error per failed attempt; pair them with
    with_last_error_only() to keep memory flat.
    """
    def apply(c: RetryConfig) -> None:
        c.attempts = attempts
    return apply


def with_retry_if(retry_if: RetryIfFn) -> Option:
    """Replace the retry predicate. Overrides the unrecoverable check too."""
    def apply(c: RetryConfig) -> None:
        c.retry_if = retry_if
    return apply


def with_on_retry(on_retry: OnRetryFn) -> Option:
    """Set a callback run after each failure that will be retried."""
    def apply(c: RetryConfig) -> None:
        c.on_retry = on_retry
    return apply


def with_delay(delay_fn: DelayFn, *options: DelayOption) -> Option:
    """Install a delay policy, clamped to max_delay, after applying its delay options."""
    def apply(c: RetryConfig) -> None:
        for opt in options:
            opt(c)
        c.delay_fn = capped(delay_fn)
    return apply


def with_context(context: CancelScope) -> Option:
    """Observe context at entry and between attempts."""
    def apply(c: RetryConfig) -> None:
        c.context = context
    return apply


def with_last_error_only(last_error_only: bool = True) -> Option:
    """Raise only the latest error instead of a RetryError of all attempts."""
    def apply(c: RetryConfig) -> None:
        c.last_error_only = last_error_only
    return apply


def with_name(name: str) -> Option:
    """Label for log messages."""
    def apply(c: RetryConfig) -> None:
        c.name = name
    return apply


# Delay options


def set_fixed_delay(seconds: float) -> DelayOption:
    """Delay used by fixed_delay."""
    def apply(c: RetryConfig) -> None:
        c.fixed_delay = seconds
    return apply


def set_random_delay(seconds: float) -> DelayOption:
    """Upper bound for random_delay."""
    def apply(c: RetryConfig) -> None:
        c.random_delay = seconds
    return apply


def set_backoff_base(seconds: float) -> DelayOption:
    """Initial delay for backoff_delay; 0 falls back to BACKOFF_UNIT."""
    def apply(c: RetryConfig) -> None:
        c.backoff_base = seconds
    return apply


def set_max_delay(seconds: float) -> DelayOption:
    """Ceiling for every delay installed by with_delay, capped at MAX_WAIT."""
    def apply(c: RetryConfig) -> None:
        c.max_delay = seconds
    return apply
