"""Structured logging for the SWR cache.

Provides:
- JSON-formatted logs for log aggregation systems
- Cache key context propagation across nested cache calls
- Human-readable console output for development

Usage:
    from swrcache.observability.logging import configure_logging

    configure_logging(json_format=False, level="DEBUG")

    with LogContext(cache_key="product:42"):
        logger.info("Revalidating")  # Includes cache_key
"""

from __future__ import annotations

import contextvars
import logging
import sys
from datetime import datetime, timezone
from typing import Any

import orjson

cache_key_var: contextvars.ContextVar[str] = contextvars.ContextVar("cache_key", default="")
trigger_var: contextvars.ContextVar[str] = contextvars.ContextVar("trigger", default="")

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON log formatter with cache context support.

    Output format:
    {
        "timestamp": "2026-01-10T12:34:56.789Z",
        "level": "WARNING",
        "logger": "swrcache.cache.swr",
        "message": "Background revalidation failed",
        "cache_key": "product:42"
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        cache_key = cache_key_var.get()
        if cache_key:
            log_data["cache_key"] = cache_key

        trigger = trigger_var.get()
        if trigger:
            log_data["trigger"] = trigger

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return orjson.dumps(log_data, default=str).decode()


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for development.

    Output format:
    2026-01-10 12:34:56 | DEBUG    | swrcache.cache.swr | Cache hit | key=product:42
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname

        if self.use_colors:
            level = f"{self.COLORS.get(level, '')}{level}{self.RESET}"

        context_parts = []
        cache_key = cache_key_var.get()
        if cache_key:
            context_parts.append(f"key={cache_key}")
        trigger = trigger_var.get()
        if trigger:
            context_parts.append(f"trigger={trigger}")
        context = f" | {' '.join(context_parts)}" if context_parts else ""

        result = f"{timestamp} | {level:8} | {record.name} | {record.getMessage()}{context}"

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result


def configure_logging(
    json_format: bool | None = None,
    level: str | None = None,
    use_colors: bool = True,
) -> None:
    """Configure application-wide logging.

    Args:
        json_format: Use JSON format; defaults to settings.log_json
        level: Log level name; defaults to settings.log_level
        use_colors: Use ANSI colors in console format
    """
    from swrcache.config import settings

    if json_format is None:
        json_format = settings.log_json
    if level is None:
        level = settings.log_level

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
    root_logger.addHandler(handler)


class LogContext:
    """Context manager for adding temporary log context.

    Usage:
        with LogContext(cache_key="product:42", trigger="focus"):
            logger.info("Notifying")  # Includes cache_key and trigger
    """

    _VARS: dict[str, contextvars.ContextVar[str]] = {
        "cache_key": cache_key_var,
        "trigger": trigger_var,
    }

    def __init__(self, **kwargs: str) -> None:
        unknown = set(kwargs) - set(self._VARS)
        if unknown:
            raise ValueError(f"Unknown log context fields: {sorted(unknown)}")
        self.extra = kwargs
        self._tokens: dict[str, contextvars.Token[str]] = {}

    def __enter__(self) -> LogContext:
        for name, value in self.extra.items():
            self._tokens[name] = self._VARS[name].set(value)
        return self

    def __exit__(self, *args: Any) -> None:
        for name, token in self._tokens.items():
            self._VARS[name].reset(token)
        self._tokens.clear()


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)
