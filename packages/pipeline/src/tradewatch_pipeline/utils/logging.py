"""
utils/logging.py — structlog configuration for tradewatch.

Log records go to stderr so that report output on stdout (tables or JSON)
stays machine-readable. The renderer is chosen by settings.log_format.
The CLI calls configure_logging() once at startup; library callers may skip
it and get structlog's defaults.

Usage:
    from tradewatch_pipeline.utils.logging import configure_logging, get_logger

    configure_logging(log_level="DEBUG")
    log = get_logger(__name__, ncm_code="72085200")
    log.info("annual_series_ready", years=21)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from tradewatch_shared.config import settings


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level:  Override settings.log_level ("DEBUG", "INFO", ...).
        log_format: Override settings.log_format ("json" | "console").
    """
    level_name = (log_level or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    fmt = log_format or settings.log_format

    # httpx logs every request at INFO through the stdlib logger
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """Return a structlog logger bound to `initial_values`."""
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger  # type: ignore[return-value]
