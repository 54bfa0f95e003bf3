"""Runtime - retry execution and the cancellation scope it observes."""

from __future__ import annotations

from .concurrency import CancelScope
from .retry import do, do_async

__all__ = ["CancelScope", "do", "do_async"]
