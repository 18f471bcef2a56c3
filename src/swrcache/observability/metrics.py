"""Prometheus metrics for the SWR cache.

Provides counters for the revalidation engine's decisions:
- hits (served from cache) and misses (blocking fetch)
- deduplicated joins onto an in-flight fetch
- background revalidations and fetch failures
- subscriber notifications

The process settings decide whether the metrics are registered at all; each
SwrCache records only when the Settings it was built with enable metrics.

Usage:
    from swrcache.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.cache_hits_total.inc()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import REGISTRY, Counter, Gauge, generate_latest

from swrcache.config import settings

logger = logging.getLogger(__name__)


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    cache_hits_total: Any = None
    cache_misses_total: Any = None
    dedup_joins_total: Any = None
    background_revalidations_total: Any = None
    fetch_failures_total: Any = None
    notifications_total: Any = None
    in_flight_requests: Any = None

    _initialized: bool = field(default=False, repr=False)
    _registry: Any = field(default=None, repr=False)

    def initialize(self) -> None:
        """Initialize Prometheus metrics."""
        if self._initialized:
            return

        if not settings.enable_metrics:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = REGISTRY

        self.cache_hits_total = Counter(
            "swr_cache_hits_total",
            "Fetches answered from the cache without waiting",
        )
        self.cache_misses_total = Counter(
            "swr_cache_misses_total",
            "Fetches that waited for the fetcher (stale or missing entry)",
        )
        self.dedup_joins_total = Counter(
            "swr_dedup_joins_total",
            "Fetches that joined an in-flight request",
        )
        self.background_revalidations_total = Counter(
            "swr_background_revalidations_total",
            "Revalidations dispatched without blocking the caller",
        )
        self.fetch_failures_total = Counter(
            "swr_fetch_failures_total",
            "Revalidations whose fetcher raised",
        )
        self.notifications_total = Counter(
            "swr_notifications_total",
            "Subscriber callbacks invoked",
        )
        self.in_flight_requests = Gauge(
            "swr_in_flight_requests",
            "Fetches currently in flight",
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if not settings.enable_metrics or self._registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)


# Global metrics registry
metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry


def record_cache_hit() -> None:
    metrics = get_metrics()
    if metrics.cache_hits_total:
        metrics.cache_hits_total.inc()


def record_cache_miss() -> None:
    metrics = get_metrics()
    if metrics.cache_misses_total:
        metrics.cache_misses_total.inc()


def record_dedup_join() -> None:
    metrics = get_metrics()
    if metrics.dedup_joins_total:
        metrics.dedup_joins_total.inc()


def record_background_revalidation() -> None:
    metrics = get_metrics()
    if metrics.background_revalidations_total:
        metrics.background_revalidations_total.inc()


def record_fetch_failure() -> None:
    metrics = get_metrics()
    if metrics.fetch_failures_total:
        metrics.fetch_failures_total.inc()


def record_notification(count: int = 1) -> None:
    """Record subscriber callbacks invoked by one notification."""
    metrics = get_metrics()
    if metrics.notifications_total and count:
        metrics.notifications_total.inc(count)


def record_in_flight(count: int) -> None:
    """Set the number of fetches currently in flight."""
    metrics = get_metrics()
    if metrics.in_flight_requests:
        metrics.in_flight_requests.set(count)
