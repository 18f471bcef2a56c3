"""Global pytest configuration and fixtures.

Provides a controllable clock and isolated cache instances.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from swrcache.cache.swr import SwrCache
from swrcache.config import Settings
from swrcache.events.triggers import ManualTriggerSource


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingFetcher:
    """Async fetcher returning a fixed value and counting its calls."""

    def __init__(self, value: object = "fresh", error: Exception | None = None) -> None:
        self.value = value
        self.error = error
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of the environment and any .env file."""
    return Settings(
        _env_file=None,
        deduping_interval=2.0,
        cache_time=300.0,
        focus_stale_after=600.0,
        background_refresh_ratio=0.5,
        revalidate_on_focus=True,
        revalidate_on_reconnect=True,
    )


@pytest.fixture
def triggers() -> ManualTriggerSource:
    return ManualTriggerSource()


@pytest.fixture
def cache(
    test_settings: Settings, clock: FakeClock, triggers: ManualTriggerSource
) -> Iterator[SwrCache]:
    """A fresh cache on the fake clock with manual environment triggers."""
    swr = SwrCache(test_settings, triggers=triggers, clock=clock)
    yield swr
    swr.close()


@pytest.fixture
def make_fetcher() -> type[CountingFetcher]:
    """Factory for counting fetchers: make_fetcher("value") or make_fetcher(error=exc)."""
    return CountingFetcher
