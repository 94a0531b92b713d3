"""Global Flask error handlers for consistent JSON error responses.

Every failure reaching the UI has the same shape:
    { "success": false, "error": { "message": "...", "code": <int> } }

Usage:
    from anime_picker.middleware.error_handlers import register_error_handlers
    register_error_handlers(app)
"""
from __future__ import annotations

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

import structlog

from anime_picker.utils.exceptions import AnimePickerError, SamplingExhaustedError

logger = structlog.get_logger(__name__)


def _error_response(message: str, code: int):
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error message.
        code: HTTP status code.

    Returns:
        Tuple of (response, status_code).
    """
    return jsonify({
        "success": False,
        "error": {
            "message": message,
            "code": code,
        },
    }), code


def register_error_handlers(app: Flask) -> None:
    """Register global error handlers on the Flask app.

    Args:
        app: Flask application instance.
    """

    # ── Standard HTTP Errors ──────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return _error_response("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return _error_response("Method not allowed", 405)

    # ── Application Errors ────────────────────────────────────────────

    @app.errorhandler(SamplingExhaustedError)
    def handle_sampling_exhausted(e: SamplingExhaustedError):
        """Generic message to the user; the cause goes to the log."""
        logger.error(
            "sampling_failed",
            attempts=e.attempts,
            last_error=str(e.last_error),
            last_error_type=type(e.last_error).__name__ if e.last_error else None,
        )
        return _error_response(e.message, e.status_code)

    @app.errorhandler(AnimePickerError)
    def handle_app_error(e: AnimePickerError):
        logger.warning(
            "app_error",
            error=e.message,
            error_type=type(e).__name__,
            status_code=e.status_code,
        )
        return _error_response(e.message, e.status_code)

    # ── Catch-all for unexpected Werkzeug HTTP exceptions ─────────────

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return _error_response(e.description or "Unknown error", e.code or 500)

    # ── Catch-all for truly unhandled exceptions ──────────────────────

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        """Last resort handler for unhandled exceptions."""
        logger.error(
            "unexpected_error",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return _error_response("An unexpected error occurred", 500)
