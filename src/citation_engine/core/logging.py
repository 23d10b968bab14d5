"""Structured logging setup.

JSON lines in production and staging, colored console output everywhere
else. Every entry carries the service name and environment, plus whatever
is bound through structlog contextvars (BatchResolver binds a ``batch_id``
so the redirect and throttle events of one batch can be correlated).

Components take an optional ``logger`` argument so callers (and tests) can
inject their own sink; otherwise they use ``get_logger(__name__)``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from citation_engine.core.config import get_settings


_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_stdlib_configured = False


def add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Stamp service name and environment onto the event."""
    settings = get_settings()
    event_dict["service"] = settings.service_name
    event_dict["environment"] = settings.environment
    return event_dict


def _processors(use_json: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_service_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if use_json:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging() -> None:
    """Configure structlog (and the stdlib root logger) from settings.

    Safe to call more than once; the stdlib handler is only installed on
    the first call.
    """
    global _stdlib_configured
    settings = get_settings()
    use_json = settings.environment in ("production", "staging")
    level = logging.getLevelName(settings.log_level.upper())

    structlog.configure(
        processors=_processors(use_json),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # Caching pins processors, which would defeat capture_logs in tests
        cache_logger_on_first_use=use_json,
    )

    if not _stdlib_configured:
        logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
        _stdlib_configured = True

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Resolved URL batch", urls=12, redirected=3)
        ```
    """
    return structlog.get_logger(name)


Logger = structlog.BoundLogger
