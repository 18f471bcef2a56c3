"""In-memory cache store.

Holds one CacheEntry per key. Entries are never swept by a timer: staleness
is evaluated lazily by the revalidation engine at access time.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class CacheEntry:
    """Last known value for a key.

    value and fetched_at are only ever replaced together by installing a new
    entry; only is_revalidating is mutated in place.
    """

    value: Any
    fetched_at: float
    is_revalidating: bool = False

    def age(self, now: float) -> float:
        """Seconds since the value was fetched."""
        return now - self.fetched_at


class CacheStore:
    """Key to CacheEntry mapping with no side effects."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def set(self, key: str, value: Any, now: float) -> CacheEntry:
        """Install a fresh entry for key and return it."""
        entry = CacheEntry(value=value, fetched_at=now)
        self._entries[key] = entry
        return entry

    def delete(self, key: str) -> bool:
        """Remove key. Returns True if an entry was removed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> list[str]:
        """Remove every entry and return the keys that were cached."""
        keys = list(self._entries)
        self._entries.clear()
        return keys

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> list[tuple[str, CacheEntry]]:
        return list(self._entries.items())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
