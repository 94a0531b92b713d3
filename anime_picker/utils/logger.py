"""Structured logging configuration using structlog.

Sets up one pipeline for the whole service:
- JSON lines in production, colored console output in development
- request_id (bound by the request middleware) merged from contextvars
- ISO timestamp and log level on every event

Usage:
    from anime_picker.utils.logger import setup_logging

    setup_logging(log_level="DEBUG", log_format="console")

    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("sampler_retry", attempt=2, max_attempts=5)
"""
from __future__ import annotations

import logging

import structlog


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        log_format: 'json' for production, 'console' for local development.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx and werkzeug log through stdlib
    logging.basicConfig(format="%(message)s", level=level)
