"""Request ID middleware for log correlation.

Every request gets an X-Request-ID (the client's own, or a fresh UUID)
bound into the structlog context, so the gateway calls and sampler
retries made for one click can be grepped together.

Usage:
    from anime_picker.middleware.request_id import init_request_id_middleware
    init_request_id_middleware(app)
"""
from __future__ import annotations

import time
import uuid

import structlog
from flask import Flask, g, request


def init_request_id_middleware(app: Flask) -> None:
    """Register before/after hooks for request ID tracing.

    Args:
        app: Flask application instance.
    """
    logger = structlog.get_logger(__name__)

    @app.before_request
    def bind_request_context() -> None:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g.request_id = request_id
        g.request_started = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
        )
        logger.debug("request_started", query=request.query_string.decode("utf-8", "replace"))

    @app.after_request
    def attach_request_id(response):
        response.headers["X-Request-ID"] = g.get("request_id", "unknown")

        started = g.get("request_started")
        duration_ms = round((time.monotonic() - started) * 1000) if started else None
        logger.info("request_completed", status=response.status_code, duration_ms=duration_ms)
        return response
