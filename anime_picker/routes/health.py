"""Health check endpoint.

Exposes GET /health reporting whether the AniList gateway answers.

Response format:
    {
        "status": "healthy" | "degraded",
        "version": "1.0.0",
        "dependencies": {"anilist_api": "ok" | "error: unreachable"}
    }
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

import structlog

logger = structlog.get_logger(__name__)

health_bp = Blueprint("health", __name__)

APP_VERSION = "1.0.0"


@health_bp.route("/health", methods=["GET"])
def health_check():
    """Application health check endpoint.

    Returns:
        200 if AniList is reachable, 503 otherwise.
    """
    client = current_app.config["ANILIST_CLIENT"]
    healthy = client.health_check()
    if not healthy:
        logger.warning("health_check_failed", dependency="anilist_api")

    return jsonify({
        "status": "healthy" if healthy else "degraded",
        "version": APP_VERSION,
        "dependencies": {"anilist_api": "ok" if healthy else "error: unreachable"},
    }), 200 if healthy else 503
