"""Shared fixtures for retrykit tests."""

from __future__ import annotations

import pytest

from retrykit import clear_settings_cache


@pytest.fixture(autouse=True)
def fresh_settings() -> object:
    """Reload settings around each test so env overrides don't leak."""
    clear_settings_cache()
    yield
    clear_settings_cache()


class Flaky:
    """Operation that fails a set number of times before succeeding."""

    def __init__(self, failures: int, error: Exception | None = None, result: object = "ok") -> None:
        self.failures = failures
        self.error = error or RuntimeError("transient")
        self.result = result
        self.calls = 0

    def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


@pytest.fixture
def flaky() -> type[Flaky]:
    return Flaky
