"""Observer binding for a single cache key.

Keeps data / error / is_validating for one key in sync with the cache, the
way a UI component would: subscribe on start, re-read the cache on every
notification, unsubscribe on close.

Example:
    binding = SwrBinding(cache, cache_key("cart", user_id), load_cart)
    await binding.start()
    render(binding.data)

    binding.mutate(optimistic_cart)  # write-through, notifies every observer
    binding.close()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from swrcache.cache.options import SwrOptions
from swrcache.cache.swr import Fetcher, SwrCache
from swrcache.events.subscriptions import Unsubscribe

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChangeHandler = Callable[["SwrBinding[Any]"], None]


class SwrBinding(Generic[T]):
    """Tracks the cached state of one key for an observer.

    A binding with a None key or fetcher is inert: start() and mutate()
    do nothing.

    Args:
        cache: Cache to read from and fetch through
        key: Cache key, or None to disable the binding
        fetcher: Zero-argument coroutine function loading the value
        options: Per-call options passed to every fetch
        on_change: Called with the binding whenever its state changes
        auto_revalidate: Re-issue fetch on signals (invalidate, clear,
            focus, reconnect), letting the cache decide whether the entry is
            stale enough to refetch. Writes are only re-read.
    """

    def __init__(
        self,
        cache: SwrCache,
        key: str | None,
        fetcher: Fetcher[T] | None,
        options: SwrOptions | None = None,
        *,
        on_change: ChangeHandler | None = None,
        auto_revalidate: bool = True,
    ) -> None:
        self.cache = cache
        self.key = key
        self.fetcher = fetcher
        self.options = options
        self.on_change = on_change
        self.auto_revalidate = auto_revalidate

        entry = cache.entry(key) if key is not None else None
        self.data: T | None = entry.value if entry is not None else None
        self.error: Exception | None = None
        self.is_validating = False

        # Last entry observed; a new entry object means a write, not a signal
        self._seen = entry
        self._unsubscribe: Unsubscribe | None = None
        self._closed = False
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def active(self) -> bool:
        return self.key is not None and self.fetcher is not None and not self._closed

    async def start(self) -> T | None:
        """Subscribe to the key and run the first fetch."""
        if not self.active or self.key is None:
            return self.data
        if self._unsubscribe is None:
            self._unsubscribe = self.cache.subscribe(self.key, self._on_notify)
        return await self.revalidate()

    async def revalidate(self) -> T | None:
        """Fetch through the cache and record the outcome.

        A fetch failure is stored in error; the last known data is kept.
        """
        if not self.active or self.key is None or self.fetcher is None:
            return self.data

        self.is_validating = True
        self._changed()
        try:
            result = await self.cache.fetch(self.key, self.fetcher, self.options)
        except Exception as e:
            if not self._closed:
                logger.debug(f"Fetch failed for bound key {self.key}: {e!r}")
                self.error = e
        else:
            if not self._closed:
                self.data = result
                self.error = None
        finally:
            if not self._closed:
                self.is_validating = False
                self._changed()
        return self.data

    def mutate(self, value: T) -> None:
        """Write value to the cache for this key."""
        if self.key is not None:
            self.cache.set(self.key, value)

    def close(self) -> None:
        """Unsubscribe; results of fetches still running are ignored."""
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_idle(self) -> None:
        """Wait for revalidations scheduled by notifications to finish."""
        while self._tasks:
            await asyncio.wait(list(self._tasks))

    def _on_notify(self) -> None:
        if self._closed or self.key is None:
            return

        entry = self.cache.entry(self.key)
        written = entry is not None and entry is not self._seen
        self._seen = entry

        # Invalidated or cleared keys reset the observer to the absent state
        self.data = entry.value if entry is not None else None
        self.is_validating = self.cache.is_validating(self.key)
        self._changed()

        # Only signals refetch; a written entry is already fresh
        if self.auto_revalidate and not written:
            self._schedule_revalidate()

    def _schedule_revalidate(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, not revalidating {self.key}")
            return
        task = loop.create_task(self.revalidate())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)
