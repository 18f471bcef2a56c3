"""Exceptions raised by the SWR cache.

Fetch failures are not wrapped: the fetcher's own exception reaches every
caller awaiting that revalidation.
"""

from __future__ import annotations


class SwrError(Exception):
    """Base class for cache errors."""


class FetcherError(SwrError):
    """Raised when a fetcher does not produce an awaitable."""

    def __init__(self, key: str, result: object):
        self.key = key
        self.result = result
        super().__init__(
            f"Fetcher for {key!r} returned {type(result).__name__}, expected an awaitable"
        )


class CacheClosedError(SwrError):
    """Raised when fetching through a cache that has been closed."""
