"""Projection of media models into the JSON cards the UI renders.

The UI only formats what it receives; every fallback label ("N/A",
"Unknown", "Not Rated", ...) is decided here.
"""
from __future__ import annotations

from typing import Any, Iterable

from anime_picker.models.api_schemas import MediaNode, MediaSummary, MediaTag, TimelineEntry
from anime_picker.services.timeline_builder import CURRENT, format_relation_type
from anime_picker.utils.sanitizer import strip_html

MAX_THEMES = 5
ANILIST_ANIME_URL = "https://anilist.co/anime/{id}"


def _tag_names(tags: Iterable[MediaTag | dict] | None, category: str) -> list[str]:
    names = []
    for tag in tags or []:
        if isinstance(tag, dict):
            tag = MediaTag(**tag)
        if tag.category == category:
            names.append(tag.name)
    return names


def extract_themes(tags: Iterable[MediaTag | dict] | None) -> str:
    """Comma-joined names of up to five `Theme` tags, or "N/A".

    >>> extract_themes([{"name": "Isekai", "category": "Theme"}])
    'Isekai'
    """
    themes = _tag_names(tags, "Theme")[:MAX_THEMES]
    return ", ".join(themes) if themes else "N/A"


def extract_demographics(tags: Iterable[MediaTag | dict] | None) -> str:
    """Comma-joined names of all `Demographic` tags, or "N/A"."""
    demographics = _tag_names(tags, "Demographic")
    return ", ".join(demographics) if demographics else "N/A"


def format_air_dates(start_year: int | None, end_year: int | None) -> str:
    """Year span label: "2010", "2010-2012", "?-2012" or "2010-Present"."""
    start = str(start_year) if start_year else "?"
    end = str(end_year) if end_year else "Present"
    return start if start == end else f"{start}-{end}"


def format_score(average_score: int | None) -> str:
    # AniList scores are 0-100
    return f"{average_score}/100" if average_score else "Not Rated"


def media_card(anime: MediaSummary, timeline_path: str | None = None) -> dict[str, Any]:
    """Flatten a sampled anime into the display card.

    Args:
        anime: The sampled media.
        timeline_path: Link to this anime's timeline view, if any.
    """
    return {
        "id": anime.id,
        "title": anime.display_title,
        "title_romaji": anime.title_romaji,
        "title_english": anime.title_english,
        "cover_image": anime.cover_image,
        "episodes": anime.episodes or "Unknown",
        "genres": ", ".join(anime.genres) if anime.genres else "N/A",
        "score": format_score(anime.average_score),
        "studio": anime.studio or "Unknown",
        "format": anime.format or "N/A",
        "themes": extract_themes(anime.tags),
        "demographics": extract_demographics(anime.tags),
        "air_dates": format_air_dates(anime.start_date.year, anime.end_date.year),
        "season": anime.season,
        "season_year": anime.season_year,
        "plot": strip_html(anime.description) or "No description available.",
        "site_url": anime.site_url,
        "timeline_url": timeline_path,
    }


def node_card(media: MediaNode) -> dict[str, Any]:
    """Card for a timeline subject without relation info."""
    return {
        "id": media.id,
        "title": media.display_title,
        "cover_image": media.cover_image,
        "year": media.start_year or "Unknown",
        "format": media.format or "Unknown",
        "url": ANILIST_ANIME_URL.format(id=media.id),
    }


def timeline_card(entry: TimelineEntry) -> dict[str, Any]:
    """Card for one timeline entry; the current anime carries no relation label."""
    card = node_card(entry.media)
    card["relation_type"] = entry.relation_type
    card["relation_label"] = None if entry.relation_type == CURRENT else format_relation_type(entry.relation_type)
    card["is_current"] = entry.is_current
    return card
