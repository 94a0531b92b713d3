"""Timeline blueprint.

Routes:
    GET /api/timeline             → "no anime selected" state
    GET /api/timeline/<media_id>  → Chronological relations of one anime
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from anime_picker.services.presenters import node_card, timeline_card

timeline_bp = Blueprint("timeline", __name__)


@timeline_bp.route("/api/timeline", defaults={"media_id": None}, methods=["GET"])
@timeline_bp.route("/api/timeline/<media_id>", methods=["GET"])
def timeline(media_id):
    """Return the ordered timeline for an anime.

    Response JSON:
        {
            "success": true,
            "status": "success" | "no_relations" | "no_subject",
            "message": "Found 3 related anime in this series",
            "subject": { ... } | null,
            "entries": [ { ..., "relation_label": "Sequel" }, ... ],
            "relation_count": 3
        }
    """
    builder = current_app.config["TIMELINE_BUILDER"]
    result = builder.build(media_id)

    return jsonify({
        "success": True,
        "status": result.status.value,
        "message": result.message,
        "subject": node_card(result.subject) if result.subject else None,
        "entries": [timeline_card(entry) for entry in result.entries],
        "relation_count": result.relation_count,
    })
