"""Stale-while-revalidate cache engine.

Serves cached values immediately while refreshing them in the background,
coalesces concurrent fetches for the same key onto one in-flight request,
and notifies subscribers whenever a key's cached value changes.

Decision per fetch(key, fetcher, options), given the entry's age:
1. An in-flight fetch exists and age < deduping_interval: join it.
2. age < cache_time: return the cached value; if the entry is older than
   half of cache_time and not already revalidating, refresh it in the
   background without waiting.
3. Otherwise (stale or missing): wait for a fresh fetch, joining the
   in-flight one if there is any.

A failed fetch keeps the stale value and re-raises the fetcher's exception
to every caller awaiting it. Nothing is retried.

Example:
    cache = SwrCache()

    async def load_product() -> dict:
        return await client.get_product(42)

    product = await cache.fetch(cache_key("product", 42), load_product)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, TypeVar

from swrcache.cache.inflight import InFlightRegistry
from swrcache.cache.options import SwrOptions
from swrcache.cache.store import CacheEntry, CacheStore
from swrcache.config import Settings
from swrcache.config import settings as default_settings
from swrcache.events.subscriptions import Subscriber, SubscriptionRegistry, Unsubscribe
from swrcache.events.triggers import NullTriggerSource, TriggerSource
from swrcache.exceptions import CacheClosedError, FetcherError
from swrcache.observability.logging import LogContext
from swrcache.observability.metrics import (
    record_background_revalidation,
    record_cache_hit,
    record_cache_miss,
    record_dedup_join,
    record_fetch_failure,
    record_in_flight,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[], Awaitable[T]]
Clock = Callable[[], float]


class SwrCache:
    """Process-wide stale-while-revalidate cache.

    Bookkeeping is synchronous and runs on the event loop thread, so the
    store and registries need no locks: other cache calls can only
    interleave at the await of a fetcher.

    Args:
        settings: Source of default options and trigger thresholds
        defaults: Options overriding the settings-derived defaults
        triggers: Source of focus / connectivity signals, resolved once
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        defaults: SwrOptions | None = None,
        triggers: TriggerSource | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.settings = settings or default_settings
        base = SwrOptions.from_settings(self.settings)
        self.defaults = defaults.merged(base) if defaults else base
        self._clock = clock
        self._store = CacheStore()
        self._in_flight = InFlightRegistry()
        self._metrics = self.settings.enable_metrics
        self._subscriptions = SubscriptionRegistry(record_metrics=self._metrics)
        # Strong references so background tasks are not garbage collected
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

        self._triggers = triggers or NullTriggerSource()
        self._triggers.install(
            self._revalidate_on_focus if self.defaults.revalidate_on_focus else None,
            self._revalidate_on_reconnect if self.defaults.revalidate_on_reconnect else None,
        )

    # -------------------------------------------------------------------------
    # Revalidation engine
    # -------------------------------------------------------------------------

    async def fetch(
        self,
        key: str,
        fetcher: Fetcher[T],
        options: SwrOptions | None = None,
    ) -> T:
        """Return the value for key, fetching it if stale or missing.

        Raises:
            CacheClosedError: If the cache has been closed
            Exception: Whatever the fetcher raised, when the caller had to wait
        """
        if self._closed:
            raise CacheClosedError(f"Cannot fetch {key!r}: cache is closed")

        opts = options.merged(self.defaults) if options else self.defaults
        now = self._clock()
        entry = self._store.get(key)
        pending = self._in_flight.get(key)

        if pending is not None and entry is not None and entry.age(now) < opts.deduping_interval:
            logger.debug(f"Joining in-flight fetch for {key}")
            self._record(record_dedup_join)
            return await asyncio.shield(pending)

        if entry is not None and entry.age(now) < opts.cache_time:
            self._record(record_cache_hit)
            refresh_after = opts.cache_time * self.settings.background_refresh_ratio
            if pending is None and not entry.is_revalidating and entry.age(now) > refresh_after:
                logger.debug(f"Serving {key} from cache, revalidating in background")
                self._record(record_background_revalidation)
                self._dispatch(key, fetcher, background=True)
            return entry.value

        self._record(record_cache_miss)
        if pending is not None:
            logger.debug(f"Cache miss for {key}, joining in-flight fetch")
            self._record(record_dedup_join)
            return await asyncio.shield(pending)

        logger.debug(f"Cache miss for {key}, fetching")
        return await asyncio.shield(self._dispatch(key, fetcher))

    def _dispatch(self, key: str, fetcher: Fetcher[T], background: bool = False) -> asyncio.Task[T]:
        """Start a revalidation for key and register it as in flight."""
        entry = self._store.get(key)
        if entry is not None:
            entry.is_revalidating = True

        task = asyncio.get_running_loop().create_task(
            self._revalidate(key, fetcher),
            name=f"swr-revalidate:{key}",
        )
        self._in_flight.register(key, task)
        self._tasks.add(task)
        task.add_done_callback(partial(self._on_settled, key, background))
        self._record(record_in_flight, len(self._in_flight))
        return task

    async def _revalidate(self, key: str, fetcher: Fetcher[T]) -> T:
        task = asyncio.current_task()
        try:
            result = fetcher()
            if not inspect.isawaitable(result):
                raise FetcherError(key, result)
            value = await result
        except BaseException:
            # Stale value stays servable; only the in-flight bookkeeping is undone
            owned = self._in_flight.release(key, task)  # type: ignore[arg-type]
            current = self._store.get(key)
            if current is not None and (owned or key not in self._in_flight):
                current.is_revalidating = False
            self._record(record_fetch_failure)
            raise

        entry = self._store.set(key, value, self._clock())
        if self._in_flight.get(key) is not task:
            # Orphaned by invalidate/clear while a newer fetch may be running
            entry.is_revalidating = key in self._in_flight
        self._subscriptions.notify(key)
        self._in_flight.release(key, task)  # type: ignore[arg-type]
        return value

    def _on_settled(self, key: str, background: bool, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        self._record(record_in_flight, len(self._in_flight))

        if task.cancelled():
            logger.debug(f"Revalidation cancelled for {key}")
            return

        # Retrieving the exception marks it observed even if no caller awaited it
        exc = task.exception()
        if exc is None:
            return
        with LogContext(cache_key=key):
            if background:
                logger.warning(f"Background revalidation failed: {exc!r}")
            else:
                logger.debug(f"Revalidation failed: {exc!r}")

    def _record(self, recorder: Callable[..., None], *args: Any) -> None:
        """Record a metric unless this cache's settings disable metrics."""
        if self._metrics:
            recorder(*args)

    async def drain(self) -> None:
        """Wait until every in-flight fetch has settled.

        Failures are not raised here; they went to their callers or the log.
        """
        while self._tasks:
            await asyncio.wait(list(self._tasks))

    @property
    def in_flight_count(self) -> int:
        """Number of keys with a fetch in flight."""
        return len(self._in_flight)

    # -------------------------------------------------------------------------
    # Cache inspection and mutation
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Any | None:
        """Cached value for key, or None when absent. Never fetches."""
        entry = self._store.get(key)
        return entry.value if entry is not None else None

    def entry(self, key: str) -> CacheEntry | None:
        """Raw cache entry for key, or None when absent."""
        return self._store.get(key)

    def is_validating(self, key: str) -> bool:
        """Whether a refresh of key's cached value is in progress."""
        entry = self._store.get(key)
        return entry.is_revalidating if entry is not None else False

    def set(self, key: str, value: Any) -> None:
        """Write value for key (manual or optimistic update) and notify."""
        self._store.set(key, value, self._clock())
        self._subscriptions.notify(key)

    def invalidate(self, key: str) -> None:
        """Drop the cached value for key and notify.

        An in-flight fetch for key is forgotten, not cancelled, so the next
        fetch always calls its fetcher.
        """
        self._store.delete(key)
        self._in_flight.forget(key)
        with LogContext(cache_key=key):
            logger.debug("Invalidated cache entry")
            self._subscriptions.notify(key)

    def clear(self) -> None:
        """Drop every cached value and notify every subscribed key once."""
        dropped = self._store.clear()
        self._in_flight.forget_all()
        subscribed = self._subscriptions.keys()
        logger.info(f"Cleared {len(dropped)} cache entries")
        for key in subscribed:
            self._subscriptions.notify(key)

    def keys(self) -> list[str]:
        return self._store.keys()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, key: str, callback: Subscriber) -> Unsubscribe:
        """Call callback (no arguments) whenever key's cached value changes.

        Returns a function that removes exactly this subscription.
        """
        return self._subscriptions.subscribe(key, callback)

    def notify(self, key: str) -> int:
        """Signal subscribers of key without changing the cache."""
        return self._subscriptions.notify(key)

    @property
    def subscriptions(self) -> SubscriptionRegistry:
        return self._subscriptions

    # -------------------------------------------------------------------------
    # Environment triggers
    # -------------------------------------------------------------------------

    def _revalidate_on_focus(self) -> None:
        """Signal subscribers of entries that went long-stale.

        Subscribers are expected to re-issue fetch, which applies the
        normal staleness check. Nothing is fetched here.
        """
        now = self._clock()
        threshold = self.settings.focus_stale_after
        with LogContext(trigger="focus"):
            for key, entry in self._store.items():
                if entry.age(now) > threshold and not entry.is_revalidating:
                    self.notify(key)

    def _revalidate_on_reconnect(self) -> None:
        """Signal subscribers of every cached key."""
        with LogContext(trigger="reconnect"):
            for key in self._store.keys():
                self.notify(key)

    def close(self) -> None:
        """Uninstall environment triggers and reject further fetches.

        Fetches already in flight run to completion.
        """
        if self._closed:
            return
        self._closed = True
        self._triggers.uninstall()

    @property
    def closed(self) -> bool:
        return self._closed


# Singleton instance for application use
_cache: SwrCache | None = None


def get_swr_cache() -> SwrCache:
    """Get or create the process-wide cache."""
    global _cache
    if _cache is None:
        _cache = SwrCache()
    return _cache


def reset_swr_cache() -> None:
    """Close and drop the process-wide cache."""
    global _cache
    if _cache is not None:
        _cache.close()
        _cache = None
