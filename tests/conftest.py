"""Shared pytest fixtures for the anime picker test suite.

Provides reusable fixtures for:
- Settings isolated from the local .env file
- Flask app and test client
- AniList payload builders
"""
import pytest

from anime_picker import create_app
from anime_picker.config import Settings


@pytest.fixture
def settings():
    """Settings with startup network checks disabled."""
    return Settings(_env_file=None, STARTUP_CHECK_ENABLED=False, LOG_FORMAT="console")


@pytest.fixture
def app(settings):
    """Create a Flask application instance for testing."""
    app = create_app(settings)
    app.config["TESTING"] = True
    yield app
    app.config["ANILIST_CLIENT"].close()


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


def make_raw_media(media_id=1, title="Cowboy Bebop", year=1998, **overrides):
    """Raw AniList media JSON as returned inside `data.Page.media`."""
    raw = {
        "id": media_id,
        "title": {"romaji": title, "english": title},
        "description": "<p>Space <b>bounty</b> hunters.</p>",
        "coverImage": {"large": "https://img/l.jpg", "extraLarge": "https://img/xl.jpg"},
        "startDate": {"year": year, "month": 4, "day": 3},
        "endDate": {"year": year + 1, "month": 4, "day": 24},
        "episodes": 26,
        "genres": ["Action", "Sci-Fi"],
        "averageScore": 86,
        "studios": {"nodes": [{"name": "Sunrise"}]},
        "tags": [
            {"name": "Space", "category": "Setting-Universe"},
            {"name": "Seinen", "category": "Demographic"},
        ],
        "siteUrl": f"https://anilist.co/anime/{media_id}",
        "format": "TV",
        "season": "SPRING",
        "seasonYear": year,
    }
    raw.update(overrides)
    return raw


def make_page_body(media, total=None, last_page=1, current_page=1, per_page=50):
    """Full GraphQL response body for the date-range page query."""
    return {
        "data": {
            "Page": {
                "pageInfo": {
                    "total": len(media) if total is None else total,
                    "perPage": per_page,
                    "currentPage": current_page,
                    "lastPage": last_page,
                    "hasNextPage": current_page < last_page,
                },
                "media": media,
            }
        }
    }


def make_node(media_id, title, year, fmt="TV"):
    """Raw relation node / subject JSON for the relations query."""
    return {
        "id": media_id,
        "title": {"romaji": title, "english": None},
        "coverImage": {"large": f"https://img/{media_id}.jpg", "extraLarge": None},
        "startDate": {"year": year},
        "format": fmt,
    }
