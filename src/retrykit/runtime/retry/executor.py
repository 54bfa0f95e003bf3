"""Retry execution loop.

Runs an operation until it succeeds, the attempt budget runs out, the retry
predicate says stop, or the cancellation scope finishes:

    entry: scope already finished → raise its error, no attempts
           attempts == 0          → return None, no attempts
    loop:  call → success         → return value
                → failure         → store (marker stripped)
                                  → retry_if false   → stop
                                  → on_retry
                                  → last attempt     → stop
                                  → wait delay, scope finishes first → stop with scope error
    exit:  last_error_only → raise the stored error
           otherwise       → raise RetryError of every stored error

The only blocking point is the wait between attempts. An in-flight
operation is never interrupted; it must honour the scope itself if needed.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from functools import wraps
from itertools import count
from typing import TYPE_CHECKING, Callable, ParamSpec, TypeVar

from retrykit.foundation.errors import RetryError, unwrap_unrecoverable

from .policy import Option, RetryConfig, with_name

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterator

P = ParamSpec("P")
T = TypeVar("T")

logger = logging.getLogger("retrykit.retry")


@dataclass(slots=True)
class _RetryRun:
    """Bookkeeping for one executor call, shared by the sync and async loops."""

    config: RetryConfig
    label: str
    errors: list[BaseException] = field(default_factory=list)

    @property
    def budget(self) -> str:
        return "∞" if self.config.attempts is None else str(self.config.attempts)

    def attempts(self) -> Iterator[int]:
        return count() if self.config.attempts is None else iter(range(self.config.attempts))

    def _store(self, error: BaseException) -> None:
        error = unwrap_unrecoverable(error)
        if self.config.last_error_only and self.errors:
            self.errors[-1] = error
        else:
            self.errors.append(error)

    def fail(self, attempt: int, error: BaseException) -> float | None:
        """Record a failed attempt. Returns the delay before the next one, or None to stop."""
        self._store(error)
        cfg = self.config
        if not cfg.retry_if(attempt, error):
            logger.debug(f"[{self.label}] Not retrying after attempt {attempt + 1} ({type(error).__name__}: {error})")
            return None
        cfg.on_retry(attempt, error)
        if cfg.is_last_attempt(attempt):
            logger.debug(f"[{self.label}] Attempt budget {self.budget} exhausted")
            return None
        delay = cfg.delay_fn(attempt, error, cfg)
        logger.info(
            f"[{self.label}] Retry {attempt + 1}/{self.budget} "
            f"after {delay:.3f}s ({type(error).__name__}: {error})"
        )
        return delay

    def interrupted(self) -> None:
        """Replace the latest stored error with the scope's error."""
        err = unwrap_unrecoverable(self.config.context.err())  # type: ignore[arg-type]
        logger.warning(f"[{self.label}] Stopped by context after {len(self.errors)} attempt(s): {err}")
        self.errors[-1] = err

    def failure(self) -> BaseException:
        """Exception to raise once the loop has given up."""
        if self.config.last_error_only:
            return self.errors[-1]
        err = RetryError(self.errors)
        err.__cause__ = self.errors[-1]
        return err


def _start(operation: Callable[..., object], options: tuple[Option, ...]) -> _RetryRun:
    config = RetryConfig.from_options(*options)
    label = config.name or getattr(operation, "__qualname__", None) or repr(operation)
    return _RetryRun(config, label)


def do(operation: Callable[[], T], *options: Option) -> T | None:
    """Call operation until it succeeds or the retry policy gives up.

    Args:
        operation: Zero-argument callable; raising an Exception counts as failure
        *options: Configuration options, applied in order

    Returns:
        The operation's return value, or None when the attempt budget is 0

    Raises:
        ContextError: The scope had finished before the first attempt
        RetryError: Every attempt failed (default mode)
        Exception: The latest error, in last-error-only mode

    Example:
        >>> do(fetch, with_attempts(3), with_delay(fixed_delay, set_fixed_delay(0.5)))
    """
    run = _start(operation, options)
    cfg = run.config
    if (err := cfg.context.err()) is not None:
        raise err
    if cfg.is_disabled:
        logger.debug(f"[{run.label}] Attempt budget is 0, skipping")
        return None

    for attempt in run.attempts():
        try:
            return operation()
        except Exception as e:
            delay = run.fail(attempt, e)
        if delay is None:
            break
        if cfg.context.wait(delay):
            run.interrupted()
            break

    raise run.failure()


async def do_async(operation: Callable[[], Awaitable[T]], *options: Option) -> T | None:
    """Async version of do(): awaits the operation and waits without blocking the loop.

    asyncio.CancelledError raised into the caller's task propagates untouched.
    """
    run = _start(operation, options)
    cfg = run.config
    if (err := cfg.context.err()) is not None:
        raise err
    if cfg.is_disabled:
        logger.debug(f"[{run.label}] Attempt budget is 0, skipping")
        return None

    for attempt in run.attempts():
        try:
            return await operation()
        except Exception as e:
            delay = run.fail(attempt, e)
        if delay is None:
            break
        if await cfg.context.wait_async(delay):
            run.interrupted()
            break

    raise run.failure()


def retry(*options: Option) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator running every call of the function through do() / do_async().

    Options are applied afresh on each call, so each call gets its own config.

    Example:
        >>> @retry(with_attempts(3), with_delay(backoff_delay, set_backoff_base(0.1)))
        ... def fetch(url: str) -> bytes:
        ...     ...
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        named = with_name(func.__qualname__)

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return do(lambda: func(*args, **kwargs), named, *options)  # type: ignore[return-value]

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await do_async(lambda: func(*args, **kwargs), named, *options)  # type: ignore[arg-type, return-value]

        return async_wrapper if inspect.iscoroutinefunction(func) else wrapper  # type: ignore[return-value]

    return decorator
