"""Tests for the async retry executor."""

from __future__ import annotations

import asyncio
import time

import pytest

from retrykit import (
    Cancelled,
    CancelScope,
    DeadlineExceeded,
    RetryError,
    Unrecoverable,
    do_async,
    fixed_delay,
    retry,
    set_fixed_delay,
    with_attempts,
    with_context,
    with_delay,
    with_last_error_only,
    with_on_retry,
    with_retry_if,
)


class AsyncFlaky:
    def __init__(self, failures: int, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or RuntimeError("transient")
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        await asyncio.sleep(0)
        if self.calls <= self.failures:
            raise self.error
        return "ok"


@pytest.mark.asyncio
async def test_async_success_after_failures() -> None:
    op = AsyncFlaky(failures=2)

    assert await do_async(op) == "ok"
    assert op.calls == 3


@pytest.mark.asyncio
async def test_async_exhausts_budget() -> None:
    error = RuntimeError("down")
    op = AsyncFlaky(failures=100, error=error)

    with pytest.raises(RetryError) as info:
        await do_async(op, with_attempts(4))

    assert op.calls == 4
    assert info.value.errors == (error,) * 4


@pytest.mark.asyncio
async def test_async_zero_budget() -> None:
    op = AsyncFlaky(failures=100)

    assert await do_async(op, with_attempts(0)) is None
    assert op.calls == 0


@pytest.mark.asyncio
async def test_async_unrecoverable() -> None:
    cause = ValueError("bad")
    op = AsyncFlaky(failures=100, error=Unrecoverable(cause))

    with pytest.raises(ValueError) as info:
        await do_async(op, with_last_error_only())

    assert info.value is cause
    assert op.calls == 1


@pytest.mark.asyncio
async def test_async_retry_if() -> None:
    op = AsyncFlaky(failures=100)
    retried: list[int] = []

    with pytest.raises(RetryError) as info:
        await do_async(op, with_retry_if(lambda n, e: n < 2), with_on_retry(lambda n, e: retried.append(n)))

    assert op.calls == 3
    assert len(info.value) == 3
    assert retried == [0, 1]


@pytest.mark.asyncio
async def test_async_cancelled_before_start() -> None:
    scope = CancelScope()
    scope.cancel()
    op = AsyncFlaky(failures=0)

    with pytest.raises(Cancelled):
        await do_async(op, with_context(scope))

    assert op.calls == 0


@pytest.mark.asyncio
async def test_async_cancel_during_delay() -> None:
    scope = CancelScope()
    op = AsyncFlaky(failures=100)
    asyncio.get_running_loop().call_later(0.05, scope.cancel)
    start = time.monotonic()

    with pytest.raises(Cancelled):
        await do_async(op, with_delay(fixed_delay, set_fixed_delay(30.0)), with_context(scope), with_last_error_only())

    assert time.monotonic() - start < 10.0
    assert op.calls == 1


@pytest.mark.asyncio
async def test_async_deadline_mid_run() -> None:
    op = AsyncFlaky(failures=100)

    with pytest.raises(DeadlineExceeded):
        await do_async(
            op,
            with_delay(fixed_delay, set_fixed_delay(0.1)),
            with_context(CancelScope(timeout=0.25)),
            with_last_error_only(),
        )

    assert 1 < op.calls < 10


@pytest.mark.asyncio
async def test_async_does_not_block_event_loop() -> None:
    ticks: list[int] = []

    async def ticker() -> None:
        for i in range(5):
            ticks.append(i)
            await asyncio.sleep(0.01)

    op = AsyncFlaky(failures=1)
    results = await asyncio.gather(
        do_async(op, with_delay(fixed_delay, set_fixed_delay(0.1))),
        ticker(),
    )

    assert results[0] == "ok"
    assert ticks == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_task_cancellation_propagates() -> None:
    op = AsyncFlaky(failures=100)
    task = asyncio.create_task(do_async(op, with_delay(fixed_delay, set_fixed_delay(30.0))))
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_async_decorator() -> None:
    calls: list[str] = []

    @retry(with_attempts(3))
    async def fetch(url: str) -> str:
        calls.append(url)
        if len(calls) < 2:
            raise ConnectionError("reset")
        return f"body of {url}"

    assert await fetch("https://example.com") == "body of https://example.com"
    assert calls == ["https://example.com"] * 2
