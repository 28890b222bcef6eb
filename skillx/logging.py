"""Logging configuration for skillx."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from skillx.config import Settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structured logging for skillx.

    Diagnostics go to stderr so a child script's stdout stays clean. The
    logger factory binds to whatever ``sys.stderr`` is at call time, and
    loggers are not cached, so reconfiguring (e.g. per CLI invocation) takes
    effect immediately.
    """
    if settings is None:
        from skillx.config import get_settings

        settings = get_settings()

    log_level = getattr(logging, settings.logging.level.upper(), logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.logging.format == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger instance.

    Args:
        name: Optional logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
