"""Logging module with structured logging and request tracking."""

import logging
from typing import TextIO

import structlog

from onboardkit.config import Settings
from onboardkit.core.logging.middleware import RequestIdMiddleware, RequestLoggingMiddleware


def configure_logging(settings: Settings, stream: TextIO | None = None) -> None:
    """Configure structlog for the API and the operator CLI.

    JSON lines in production, the console renderer everywhere else. The CLI
    passes ``sys.stderr`` so log lines never mix with report output.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if settings.is_production
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=settings.is_production,
    )


__all__ = [
    "RequestIdMiddleware",
    "RequestLoggingMiddleware",
    "configure_logging",
]
