"""Error classification and aggregation for retry execution.

Provides the unrecoverable marker operations raise to stop retrying,
the aggregate RetryError carrying one error per attempt, and the
cancellation errors a CancelScope reports.

Chain inspection follows explicit chaining (``raise ... from ...``),
which is how Python expresses "this error wraps that one".
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TypeVar, overload

E = TypeVar("E", bound=BaseException)


# ─────────────────────────────────────────────────────────────────────────────
# Cause Chain
# ─────────────────────────────────────────────────────────────────────────────


def iter_causes(err: BaseException) -> Iterator[BaseException]:
    """Yield err followed by every exception reachable through __cause__.

    Stops on cycles, which explicit chaining can create.
    """
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def chain_contains(err: BaseException, target: BaseException) -> bool:
    """Whether target is err or sits anywhere in its cause chain."""
    return any(e is target or e == target for e in iter_causes(err))


def chain_find(err: BaseException, exc_type: type[E]) -> E | None:
    """First exception in err's cause chain that is an instance of exc_type."""
    return next((e for e in iter_causes(err) if isinstance(e, exc_type)), None)


# ─────────────────────────────────────────────────────────────────────────────
# Unrecoverable Marker
# ─────────────────────────────────────────────────────────────────────────────


class Unrecoverable(Exception):
    """Marker wrapping an error that must not be retried.

    The wrapped error is kept both as ``error`` and as ``__cause__`` so
    ordinary chain inspection reaches it. The executor strips the marker
    before storing or raising, so callers only ever see the wrapped error.

    Example:
        >>> def fetch():
        ...     if response.status == 404:
        ...         raise Unrecoverable(LookupError("gone"))
        ...     ...
    """

    __slots__ = ("error",)

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(error)
        self.__cause__ = error

    def __str__(self) -> str:
        return str(self.error)

    def __repr__(self) -> str:
        return f"Unrecoverable({self.error!r})"


def mark_unrecoverable(err: BaseException) -> Unrecoverable:
    """Wrap err so the default retry predicate stops immediately."""
    return Unrecoverable(err)


def is_unrecoverable(err: BaseException) -> bool:
    """Whether err is, or is chained from, an unrecoverable marker."""
    return chain_find(err, Unrecoverable) is not None


def unwrap_unrecoverable(err: BaseException) -> BaseException:
    """Strip the marker from err, returning the innermost wrapped error.

    Nested markers are peeled all the way down. Errors that are not
    themselves markers come back unchanged, even when a marker sits
    deeper in their chain.
    """
    while isinstance(err, Unrecoverable):
        err = err.error
    return err


# ─────────────────────────────────────────────────────────────────────────────
# Cancellation
# ─────────────────────────────────────────────────────────────────────────────


class ContextError(Exception):
    """Base for errors reported by a finished CancelScope."""


class Cancelled(ContextError):
    """The scope was cancelled explicitly."""

    def __init__(self, message: str = "context cancelled") -> None:
        super().__init__(message)


class DeadlineExceeded(ContextError, TimeoutError):
    """The scope's deadline passed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


# ─────────────────────────────────────────────────────────────────────────────
# Aggregate Error
# ─────────────────────────────────────────────────────────────────────────────


def _message(err: BaseException) -> str:
    return str(err) or type(err).__name__


class RetryError(Exception, Sequence[BaseException]):
    """Errors collected across retry attempts, one per attempt made.

    Behaves as a read-only sequence indexed by attempt. Inspection helpers
    search every stored error and its cause chain, so a caller can ask
    whether a particular failure happened on any attempt.

    Example:
        >>> try:
        ...     do(fetch, with_attempts(3))
        ... except RetryError as e:
        ...     len(e)                    # 3
        ...     e.find(ConnectionError)   # first ConnectionError seen, or None
        ...     sentinel in e             # identity search across all attempts
    """

    __slots__ = ("_errors",)

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self._errors: tuple[BaseException, ...] = tuple(errors)
        super().__init__(self.format())

    @property
    def errors(self) -> tuple[BaseException, ...]:
        return self._errors

    @property
    def last(self) -> BaseException | None:
        """Error from the final attempt, if any attempt was made."""
        return self._errors[-1] if self._errors else None

    def format(self) -> str:
        """Render a header line followed by ``# <index>: <message>`` per attempt."""
        n = len(self._errors)
        lines = [f"retry failed after {n} attempt{'s' if n != 1 else ''}:"]
        lines += [f"# {i}: {_message(e)}" for i, e in enumerate(self._errors)]
        return "\n".join(lines)

    def contains(self, target: BaseException) -> bool:
        """Whether target appears in any stored error's cause chain."""
        return any(chain_contains(e, target) for e in self._errors)

    def find(self, exc_type: type[E]) -> E | None:
        """First stored (or chained) error of exc_type, scanning attempts in order."""
        for e in self._errors:
            if (match := chain_find(e, exc_type)) is not None:
                return match
        return None

    def __contains__(self, target: object) -> bool:
        return isinstance(target, BaseException) and self.contains(target)

    def __len__(self) -> int:
        return len(self._errors)

    @overload
    def __getitem__(self, index: int) -> BaseException: ...
    @overload
    def __getitem__(self, index: slice) -> tuple[BaseException, ...]: ...

    def __getitem__(self, index: int | slice) -> BaseException | tuple[BaseException, ...]:
        return self._errors[index]

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self._errors)

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"RetryError({list(self._errors)!r})"

    def __reduce__(self) -> tuple[type[RetryError], tuple[tuple[BaseException, ...]]]:
        return type(self), (self._errors,)
