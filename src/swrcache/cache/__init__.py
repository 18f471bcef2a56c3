"""Cache layer for swrcache.

Provides the stale-while-revalidate pattern for async fetches:
- Cached values are served immediately, refreshed in the background
- Concurrent fetches for one key share a single in-flight request
- Subscribers are notified when a key's cached value changes
- Staleness is evaluated lazily at access time, never swept by a timer
"""

from swrcache.cache.inflight import InFlightRegistry
from swrcache.cache.keys import CacheKeys, cache_key
from swrcache.cache.options import SwrOptions
from swrcache.cache.store import CacheEntry, CacheStore
from swrcache.cache.swr import Fetcher, SwrCache, get_swr_cache, reset_swr_cache

__all__ = [
    # Core cache
    "CacheEntry",
    "CacheStore",
    "InFlightRegistry",
    "SwrCache",
    "SwrOptions",
    "Fetcher",
    "get_swr_cache",
    "reset_swr_cache",
    # Keys
    "CacheKeys",
    "cache_key",
]
