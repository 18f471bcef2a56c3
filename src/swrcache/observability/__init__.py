"""Observability module for the SWR cache.

Provides metrics and structured logging:
- Prometheus counters for cache decisions
- JSON / console logging with cache key context
"""

from swrcache.observability.logging import (
    LogContext,
    cache_key_var,
    configure_logging,
    get_logger,
    trigger_var,
)
from swrcache.observability.metrics import (
    MetricsRegistry,
    get_metrics,
    metrics_registry,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    "cache_key_var",
    "trigger_var",
    # Metrics
    "MetricsRegistry",
    "metrics_registry",
    "get_metrics",
]
