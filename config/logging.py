"""Structured logging configuration using structlog.

JSON output in production, pretty console in development.
"""

import logging

import structlog


def configure_logging(environment: str = "development", log_level: str = "INFO") -> None:
    """Configure structlog for the application.

    Args:
        environment: One of "development" or "production". Controls output format.
        log_level: Minimum level name to emit (e.g. "DEBUG", "INFO").
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
