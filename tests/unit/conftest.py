"""Unit-specific fixtures (no I/O beyond mocked HTTP and tmp_path)."""

from __future__ import annotations

import pytest

from inkwell.cache import BoundedCache


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> BoundedCache:
    """Small cache on a fake clock."""
    return BoundedCache(max_items=4, max_bytes=100, default_ttl=60, clock=clock)
