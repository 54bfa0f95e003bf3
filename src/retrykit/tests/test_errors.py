"""Tests for error classification and the aggregate RetryError."""

from __future__ import annotations

import pickle

import pytest

from retrykit import (
    Cancelled,
    ContextError,
    DeadlineExceeded,
    RetryError,
    Unrecoverable,
    is_unrecoverable,
    mark_unrecoverable,
    unwrap_unrecoverable,
)
from retrykit.foundation.errors import chain_contains, chain_find, iter_causes


class FooError(Exception):
    pass


class BarError(Exception):
    pass


# ─────────────────────────────────────────────────────────────────────────────
# Unrecoverable Marker
# ─────────────────────────────────────────────────────────────────────────────


def test_mark_wraps_error() -> None:
    cause = ValueError("bad input")
    marked = mark_unrecoverable(cause)

    assert isinstance(marked, Unrecoverable)
    assert marked.error is cause
    assert marked.__cause__ is cause
    assert str(marked) == "bad input"


def test_is_unrecoverable() -> None:
    assert is_unrecoverable(Unrecoverable(ValueError("x")))
    assert not is_unrecoverable(ValueError("x"))
    assert not is_unrecoverable(RuntimeError(Unrecoverable(ValueError("x"))))  # In args, not chained


def test_is_unrecoverable_through_chain() -> None:
    """A marker raised 'from' deeper in the chain still classifies."""
    outer = RuntimeError("wrapper")
    outer.__cause__ = Unrecoverable(ValueError("root"))

    assert is_unrecoverable(outer)


def test_unwrap_unrecoverable() -> None:
    cause = ValueError("root")

    assert unwrap_unrecoverable(Unrecoverable(cause)) is cause
    assert unwrap_unrecoverable(Unrecoverable(Unrecoverable(cause))) is cause
    assert unwrap_unrecoverable(cause) is cause


def test_unwrap_leaves_chained_marker_alone() -> None:
    outer = RuntimeError("wrapper")
    outer.__cause__ = Unrecoverable(ValueError("root"))

    assert unwrap_unrecoverable(outer) is outer


# ─────────────────────────────────────────────────────────────────────────────
# Chain Walking
# ─────────────────────────────────────────────────────────────────────────────


def test_iter_causes_follows_explicit_chain() -> None:
    root = FooError("root")
    try:
        try:
            raise root
        except FooError as e:
            raise BarError("outer") from e
    except BarError as outer:
        chain = list(iter_causes(outer))

    assert [type(e) for e in chain] == [BarError, FooError]
    assert chain[1] is root


def test_iter_causes_stops_on_cycle() -> None:
    a, b = FooError("a"), BarError("b")
    a.__cause__, b.__cause__ = b, a

    assert list(iter_causes(a)) == [a, b]


def test_chain_helpers() -> None:
    root = FooError("root")
    outer = BarError("outer")
    outer.__cause__ = root

    assert chain_contains(outer, root)
    assert not chain_contains(outer, FooError("root"))
    assert chain_find(outer, FooError) is root
    assert chain_find(outer, KeyError) is None


# ─────────────────────────────────────────────────────────────────────────────
# Cancellation Errors
# ─────────────────────────────────────────────────────────────────────────────


def test_context_error_types() -> None:
    assert isinstance(Cancelled(), ContextError)
    assert isinstance(DeadlineExceeded(), ContextError)
    assert isinstance(DeadlineExceeded(), TimeoutError)
    assert str(Cancelled()) == "context cancelled"
    assert str(DeadlineExceeded()) == "context deadline exceeded"


# ─────────────────────────────────────────────────────────────────────────────
# RetryError
# ─────────────────────────────────────────────────────────────────────────────


def test_retry_error_format() -> None:
    err = RetryError([ValueError("first"), KeyError("k"), RuntimeError()])

    assert str(err) == (
        "retry failed after 3 attempts:\n"
        "# 0: first\n"
        "# 1: 'k'\n"
        "# 2: RuntimeError"
    )


def test_retry_error_format_single() -> None:
    assert RetryError([ValueError("only")]).format() == "retry failed after 1 attempt:\n# 0: only"


def test_retry_error_is_sequence() -> None:
    errors = [ValueError("a"), ValueError("b")]
    err = RetryError(errors)

    assert len(err) == 2
    assert err[0] is errors[0]
    assert err[-1] is errors[1]
    assert list(err) == errors
    assert err.errors == tuple(errors)
    assert err.last is errors[1]
    assert RetryError([]).last is None


def test_retry_error_contains() -> None:
    expected = FooError("error")
    closed = OSError("closed")
    err = RetryError([expected, closed])

    assert err.contains(expected)
    assert err.contains(closed)
    assert not err.contains(FooError("error"))  # Equal text, different error
    assert expected in err
    assert "error" not in err


def test_retry_error_contains_through_cause() -> None:
    root = FooError("root")
    wrapped = BarError("wrapped")
    wrapped.__cause__ = root

    assert RetryError([ValueError("x"), wrapped]).contains(root)


def test_retry_error_find() -> None:
    foo = FooError("foo")
    err = RetryError([ValueError("x"), foo, FooError("later")])

    assert err.find(FooError) is foo
    assert err.find(BarError) is None
    assert err.find(Exception) is err[0]


def test_retry_error_find_scans_chain() -> None:
    foo = FooError("foo")
    outer = BarError("outer")
    outer.__cause__ = foo

    assert RetryError([outer]).find(FooError) is foo


def test_retry_error_is_raisable() -> None:
    with pytest.raises(RetryError) as info:
        raise RetryError([ValueError("x")])

    assert len(info.value) == 1


def test_retry_error_pickles() -> None:
    err = RetryError([ValueError("a"), KeyError("b")])
    restored = pickle.loads(pickle.dumps(err))

    assert len(restored) == 2
    assert str(restored) == str(err)
