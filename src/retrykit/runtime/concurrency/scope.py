"""Cancellation scope observed by the retry executor between attempts.

A CancelScope finishes either when cancel() is called (from any thread)
or when its deadline passes. Once finished it reports a single error,
Cancelled or DeadlineExceeded, whichever happened first.

Waiting is the only blocking primitive: wait() for threads, wait_async()
for coroutines. Both return as soon as the scope finishes.

Example:
    >>> scope = CancelScope(timeout=5.0)
    >>> threading.Timer(1.0, scope.cancel).start()
    >>> scope.wait(10.0)   # returns True after ~1s
    True
    >>> scope.err()
    Cancelled('context cancelled')
"""

from __future__ import annotations

import asyncio
import threading
import time
from _thread import LockType
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from retrykit.foundation.config import MAX_WAIT
from retrykit.foundation.errors import Cancelled, ContextError, DeadlineExceeded

if TYPE_CHECKING:
    from types import TracebackType


def _resolve(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)


@dataclass(slots=True, eq=False)
class CancelScope:
    """Cancellation and deadline signal shared with the retry loop.

    Attributes:
        timeout: Seconds from construction until the scope expires
        deadline: Absolute expiry on the time.monotonic() clock

    When both are given the earlier one applies. With neither, the scope
    only finishes through cancel().
    """

    timeout: float | None = None
    deadline: float | None = None
    _event: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _lock: LockType = field(default_factory=threading.Lock, init=False, repr=False)
    _error: ContextError | None = field(default=None, init=False, repr=False)
    _waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = field(
        default_factory=list, init=False, repr=False,
    )

    def __post_init__(self) -> None:
        if self.timeout is not None:
            expiry = time.monotonic() + self.timeout
            self.deadline = expiry if self.deadline is None else min(self.deadline, expiry)

    @property
    def cancel_called(self) -> bool:
        """Whether the scope finished through cancel() rather than its deadline."""
        return isinstance(self._error, Cancelled)

    @property
    def done(self) -> bool:
        return self.err() is not None

    def remaining(self) -> float | None:
        """Seconds until the deadline, or None when there is no deadline."""
        return None if self.deadline is None else max(0.0, self.deadline - time.monotonic())

    def cancel(self) -> None:
        """Finish the scope and wake every waiter. Safe from any thread."""
        self._finish(Cancelled())

    def err(self) -> ContextError | None:
        """The error the scope finished with, or None while it is live."""
        if self._error is None and self.deadline is not None and time.monotonic() >= self.deadline:
            self._finish(DeadlineExceeded())
        return self._error

    def wait(self, delay: float) -> bool:
        """Block up to delay seconds. Returns True if the scope finished first."""
        if self.err() is not None:
            return True
        timeout, expires = self._bound(delay)
        if self._event.wait(timeout):
            return True
        if expires:
            self._finish(DeadlineExceeded())
        return self.err() is not None

    async def wait_async(self, delay: float) -> bool:
        """Await up to delay seconds. Returns True if the scope finished first."""
        if self.err() is not None:
            return True
        timeout, expires = self._bound(delay)
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()
        with self._lock:
            if self._error is None:
                self._waiters.append((loop, waiter))
            else:
                waiter.set_result(None)
        try:
            await asyncio.wait_for(waiter, timeout)
            return True
        except TimeoutError:
            pass
        finally:
            with self._lock:
                if (loop, waiter) in self._waiters:
                    self._waiters.remove((loop, waiter))
        if expires:
            self._finish(DeadlineExceeded())
        return self.err() is not None

    def _bound(self, delay: float) -> tuple[float, bool]:
        """Clamp a requested wait to the deadline and MAX_WAIT. Second item: whether the deadline cuts it short."""
        delay = max(0.0, delay)
        if (remaining := self.remaining()) is not None and remaining <= delay:
            return min(remaining, MAX_WAIT), remaining <= MAX_WAIT
        return min(delay, MAX_WAIT), False

    def _finish(self, error: ContextError) -> None:
        with self._lock:
            if self._error is not None:
                return
            self._error = error
            waiters, self._waiters = self._waiters, []
        self._event.set()
        for loop, waiter in waiters:
            loop.call_soon_threadsafe(_resolve, waiter)

    def __enter__(self) -> CancelScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.cancel()  # Release anything still waiting on this scope
