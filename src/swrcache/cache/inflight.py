"""Registry of outstanding fetches, one per key.

The engine consults this registry to coalesce concurrent requests for the
same key onto a single fetch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

logger = logging.getLogger(__name__)


class InFlightRegistry:
    """Tracks at most one outstanding fetch task per key."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def get(self, key: str) -> asyncio.Task[Any] | None:
        return self._tasks.get(key)

    def register(self, key: str, task: asyncio.Task[Any]) -> None:
        """Register task as the in-flight fetch for key.

        Any previous registration must have been released or forgotten.
        """
        if key in self._tasks:
            raise RuntimeError(f"A fetch is already in flight for {key!r}")
        self._tasks[key] = task
        logger.debug(f"Registered in-flight fetch for {key}")

    def release(self, key: str, task: asyncio.Task[Any]) -> bool:
        """Remove the registration for key if it still belongs to task."""
        if self._tasks.get(key) is task:
            del self._tasks[key]
            return True
        return False

    def forget(self, key: str) -> asyncio.Task[Any] | None:
        """Drop the registration for key without cancelling the task."""
        return self._tasks.pop(key, None)

    def forget_all(self) -> list[asyncio.Task[Any]]:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        return tasks

    def tasks(self) -> list[asyncio.Task[Any]]:
        return list(self._tasks.values())

    def __contains__(self, key: object) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)
