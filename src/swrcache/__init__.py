"""swrcache: stale-while-revalidate caching for asyncio."""

from swrcache.binding import SwrBinding
from swrcache.cache import (
    CacheEntry,
    CacheKeys,
    SwrCache,
    SwrOptions,
    cache_key,
    get_swr_cache,
    reset_swr_cache,
)
from swrcache.events import ManualTriggerSource, NullTriggerSource, TriggerSource
from swrcache.exceptions import CacheClosedError, FetcherError, SwrError

__version__ = "0.1.0"

__all__ = [
    "CacheEntry",
    "CacheKeys",
    "SwrBinding",
    "SwrCache",
    "SwrOptions",
    "cache_key",
    "get_swr_cache",
    "reset_swr_cache",
    "TriggerSource",
    "NullTriggerSource",
    "ManualTriggerSource",
    "SwrError",
    "FetcherError",
    "CacheClosedError",
]
