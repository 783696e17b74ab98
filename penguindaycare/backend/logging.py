"""Structured logging configuration using structlog.

Usage:
    from penguindaycare.backend.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=False)
    logger = get_logger(__name__)
    logger.info("roster_refreshed", penguins=3)
"""

from __future__ import annotations

import logging

import structlog

Processor = structlog.typing.Processor


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog once during application startup.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Render JSON lines instead of the colored console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_logs:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.typing.WrappedLogger:
    """Return a structlog logger bound with the calling module name.

    The name is passed as an initial ``logger_name`` value so the proxy stays
    lazy and module-level loggers follow a later configure_logging() call.
    """
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger_name=name)
