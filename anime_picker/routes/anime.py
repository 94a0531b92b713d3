"""Random anime blueprint.

Routes:
    GET /api/random → Pick one random anime from a year range
"""
from __future__ import annotations

import structlog
from flask import Blueprint, current_app, jsonify, request, url_for
from pydantic import ValidationError

from anime_picker.models.requests import RandomAnimeQuery
from anime_picker.services.presenters import media_card

logger = structlog.get_logger(__name__)

anime_bp = Blueprint("anime", __name__)


@anime_bp.route("/api/random", methods=["GET"])
def random_anime():
    """Return a randomly selected anime whose start date lies in the range.

    Query string:
        start_year: inclusive, defaults to MIN_YEAR
        end_year: inclusive, defaults to MAX_YEAR

    Response JSON:
        {
            "success": true,
            "anime": { "id": 1535, "title": "Death Note", ... }
        }
    """
    try:
        query = RandomAnimeQuery(**request.args.to_dict())
    except ValidationError as e:
        errors = e.errors()
        message = errors[0].get("msg", "Validation error") if errors else "Invalid request"
        return jsonify({
            "success": False,
            "error": {"message": message, "code": 422},
        }), 422

    settings = current_app.config["SETTINGS"]
    start_year = query.start_year if query.start_year is not None else settings.MIN_YEAR
    end_year = query.end_year if query.end_year is not None else settings.MAX_YEAR

    sampler = current_app.config["SAMPLER"]
    anime = sampler.sample(start_year, end_year)

    return jsonify({
        "success": True,
        "anime": media_card(anime, timeline_path=url_for("timeline.timeline", media_id=anime.id)),
    })
