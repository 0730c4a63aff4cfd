"""Centralized structlog configuration helpers."""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from structlog.types import Processor

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# EVDS expects the key inside the URL path, so it leaks into anything logging URLs.
_API_KEY_PATTERN = re.compile(r"(key=)[^&\s]+")


def redact_key(text: str) -> str:
    """Return ``text`` with every ``key=...`` fragment masked."""
    return _API_KEY_PATTERN.sub(r"\1***", text)


def redact_api_key(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask ``key=...`` fragments in string values of a log event.

    Runs after ``format_exc_info`` so rendered tracebacks are masked too.
    """
    for name, value in event_dict.items():
        if isinstance(value, str) and "key=" in value:
            event_dict[name] = redact_key(value)
    return event_dict


def configure_logging(
    level: str = "info",
    *,
    json_output: bool = False,
) -> None:
    """Initialize structlog with a consistent processor chain on stderr."""

    normalized = level.lower()
    if normalized not in LOG_LEVELS:
        valid = ", ".join(sorted(LOG_LEVELS))
        raise ValueError(f"Unsupported log level {level!r}. Choose one of: {valid}.")
    level_value = LOG_LEVELS[normalized]

    logging.basicConfig(level=level_value, format="%(message)s", stream=sys.stderr)
    # urllib3 logs every connection at DEBUG, URL and key included.
    logging.getLogger("urllib3").setLevel(max(level_value, logging.INFO))

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_api_key,
    ]
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = ["configure_logging", "redact_api_key", "redact_key", "LOG_LEVELS"]
