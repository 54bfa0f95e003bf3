"""Concurrency primitives for the retry runtime.

Key Components:
    - CancelScope: cancellation / deadline signal, waitable from threads and coroutines
"""

from __future__ import annotations

from .scope import CancelScope

__all__ = ["CancelScope"]
