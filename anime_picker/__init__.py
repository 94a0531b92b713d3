"""Random Anime Generator — Flask Application Package.

The `create_app()` factory wires configuration, logging, middleware, the
AniList client, the random sampler, the timeline builder and the JSON
blueprints the web UI calls.
"""
from __future__ import annotations

import structlog
from flask import Flask
from flask_cors import CORS

from anime_picker.config import get_settings, Settings
from anime_picker.utils.logger import setup_logging
from anime_picker.middleware.request_id import init_request_id_middleware
from anime_picker.middleware.error_handlers import register_error_handlers


def create_app(settings: Settings | None = None) -> Flask:
    """Application factory pattern.

    Args:
        settings: Explicit settings (tests); defaults to `get_settings()`.

    Returns:
        Configured Flask application instance.
    """
    settings = settings or get_settings()

    # ── Logging (must be first so all subsequent logs are formatted) ──
    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
    logger = structlog.get_logger(__name__)

    # ── Flask app ─────────────────────────────────────────────────────
    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.config["FLASK_DEBUG"] = settings.FLASK_DEBUG
    app.config["SETTINGS"] = settings

    # ── Middleware ─────────────────────────────────────────────────────
    init_request_id_middleware(app)
    register_error_handlers(app)

    # ── CORS ──────────────────────────────────────────────────────────
    CORS(app, resources={
        r"/api/*": {"origins": "*"},
        r"/health": {"origins": "*"},
    })

    # ── Services ──────────────────────────────────────────────────────
    _init_services(app, settings)

    # ── Startup validation ────────────────────────────────────────────
    if settings.STARTUP_CHECK_ENABLED:
        _validate_startup(app, logger)

    # ── Blueprints ────────────────────────────────────────────────────
    from anime_picker.routes.anime import anime_bp
    from anime_picker.routes.health import health_bp
    from anime_picker.routes.timeline import timeline_bp
    app.register_blueprint(health_bp)
    app.register_blueprint(anime_bp)
    app.register_blueprint(timeline_bp)

    logger.info(
        "app_started",
        env=settings.FLASK_ENV,
        anilist_url=settings.ANILIST_API_URL,
        per_page=settings.SAMPLER_PER_PAGE,
        sort=settings.SAMPLER_SORT,
        log_level=settings.LOG_LEVEL,
    )

    return app


def _init_services(app: Flask, settings: Settings) -> None:
    """Create the AniList client, sampler and timeline builder.

    All services are stored on `app.config` for access via `current_app`.
    """
    from anime_picker.api_clients.anilist_client import AniListClient
    from anime_picker.services.random_sampler import RandomSampler, RetryPolicy
    from anime_picker.services.timeline_builder import TimelineBuilder

    logger = structlog.get_logger(__name__)
    logger.info("initializing_services")

    anilist = AniListClient(
        endpoint=settings.ANILIST_API_URL,
        rate_limit=settings.ANILIST_RATE_LIMIT,
        timeout=settings.HTTP_TIMEOUT,
        max_retries=settings.HTTP_MAX_RETRIES,
    )

    sampler = RandomSampler(
        anilist,
        per_page=settings.SAMPLER_PER_PAGE,
        sort=settings.SAMPLER_SORT,
        retry_policy=RetryPolicy(max_attempts=settings.SAMPLER_MAX_ATTEMPTS),
        min_year=settings.MIN_YEAR,
        max_year=settings.MAX_YEAR,
    )

    app.config["ANILIST_CLIENT"] = anilist
    app.config["SAMPLER"] = sampler
    app.config["TIMELINE_BUILDER"] = TimelineBuilder(anilist)

    logger.info("services_initialized")


def _validate_startup(app: Flask, logger) -> None:
    """Ping AniList once; failures are logged, never fatal."""
    logger.info("startup_validation", phase="begin")
    reachable = app.config["ANILIST_CLIENT"].health_check()
    if reachable:
        logger.info("startup_check", api="AniList", status="ok")
    else:
        logger.warning("startup_check_failed", api="AniList")
    logger.info("startup_validation", phase="complete")
