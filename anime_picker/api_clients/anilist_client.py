"""AniList GraphQL client for the two read-only queries the service needs.

Endpoint: https://graphql.anilist.co
Rate Limit: 90 req/min per IP (degraded to 30 at times)
Auth: None required

Queries:
- fetch_media_page: one page of anime whose start date falls in a range
- fetch_media_relations: one anime plus its relation edges
"""
from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError

from anime_picker.api_clients.base_client import BaseGraphQLClient
from anime_picker.models.api_schemas import (
    FuzzyDate,
    MediaNode,
    MediaPage,
    MediaRelations,
    MediaSummary,
    MediaTag,
    PageInfo,
    RelationEdge,
)
from anime_picker.models.requests import MediaFilter
from anime_picker.utils.exceptions import GatewayProtocolError

logger = structlog.get_logger(__name__)

MEDIA_BY_DATE_RANGE_QUERY = """
query ($page: Int, $perPage: Int, $startDate: FuzzyDateInt, $endDate: FuzzyDateInt, $sort: [MediaSort]) {
  Page(page: $page, perPage: $perPage) {
    pageInfo {
      total
      perPage
      currentPage
      lastPage
      hasNextPage
    }
    media(
      type: ANIME,
      startDate_greater: $startDate,
      startDate_lesser: $endDate,
      sort: $sort
    ) {
      id
      title { romaji english }
      description
      coverImage { large extraLarge }
      startDate { year month day }
      endDate { year month day }
      episodes
      genres
      averageScore
      studios { nodes { name } }
      tags { name category }
      siteUrl
      format
      season
      seasonYear
    }
  }
}
"""

MEDIA_RELATIONS_QUERY = """
query ($id: Int) {
  Media(id: $id) {
    id
    title { romaji english }
    coverImage { large extraLarge }
    startDate { year }
    format
    relations {
      edges {
        relationType
        node {
          id
          title { romaji english }
          coverImage { large extraLarge }
          startDate { year }
          format
        }
      }
    }
  }
}
"""


class AniListClient(BaseGraphQLClient):
    """Client for the AniList GraphQL API."""

    def __init__(
        self,
        endpoint: str = "https://graphql.anilist.co",
        rate_limit: float = 0.0,
        timeout: float | None = None,
        max_retries: int = 1,
    ) -> None:
        super().__init__(
            endpoint=endpoint,
            rate_limit=rate_limit,
            timeout=timeout,
            max_retries=max_retries,
        )

    # ── Queries ───────────────────────────────────────────────────────

    def fetch_media_page(
        self,
        media_filter: MediaFilter,
        page: int = 1,
        per_page: int = 50,
        sort: str = "POPULARITY_DESC",
    ) -> MediaPage:
        """Fetch one page of anime that started airing within the filter's range.

        Args:
            media_filter: Validated year range.
            page: 1-based page number.
            per_page: Page size (AniList caps it at 50).
            sort: AniList MediaSort value; must be stable between calls.

        Returns:
            MediaPage with the page info and the page's media.

        Raises:
            GatewayProtocolError: On transport failure or malformed payload.
        """
        data = self.execute(
            MEDIA_BY_DATE_RANGE_QUERY,
            variables={
                "page": page,
                "perPage": per_page,
                "startDate": media_filter.after_date,
                "endDate": media_filter.before_date,
                "sort": [sort],
            },
            operation="media_page",
        )
        raw_page = data.get("Page")
        if not isinstance(raw_page, dict) or not isinstance(raw_page.get("pageInfo"), dict):
            raise GatewayProtocolError(
                message="Invalid response: missing Page.pageInfo",
                client_name=self._client_name,
            )
        page_info = raw_page["pageInfo"]
        for key in ("total", "lastPage"):
            value = page_info.get(key)
            if not isinstance(value, int) or isinstance(value, bool):
                raise GatewayProtocolError(
                    message=f"Invalid response: pageInfo.{key}={value!r}",
                    client_name=self._client_name,
                )
        try:
            return MediaPage(
                page_info=self._parse_page_info(page_info),
                media=[self._parse_media(item) for item in raw_page.get("media") or []],
            )
        except (ValidationError, KeyError, TypeError, AttributeError) as e:
            raise GatewayProtocolError(
                message=f"Invalid response: malformed media page ({e.__class__.__name__})",
                client_name=self._client_name,
            ) from e

    def fetch_media_relations(self, media_id: int) -> MediaRelations:
        """Fetch an anime together with all of its relation edges.

        Args:
            media_id: AniList media ID.

        Returns:
            MediaRelations with the subject and every declared edge.

        Raises:
            GatewayProtocolError: On transport failure, unknown id or malformed payload.
        """
        data = self.execute(MEDIA_RELATIONS_QUERY, variables={"id": media_id}, operation="media_relations")
        raw_media = data.get("Media")
        if not isinstance(raw_media, dict):
            raise GatewayProtocolError(
                message=f"Media {media_id} not found",
                client_name=self._client_name,
            )
        try:
            edges = (raw_media.get("relations") or {}).get("edges") or []
            return MediaRelations(
                subject=self._parse_node(raw_media),
                relations=[
                    RelationEdge(
                        relation_type=edge.get("relationType") or "OTHER",
                        node=self._parse_node(edge["node"]),
                    )
                    for edge in edges
                    if edge.get("node")
                ],
            )
        except (ValidationError, KeyError, TypeError, AttributeError) as e:
            raise GatewayProtocolError(
                message=f"Invalid response: malformed relations for media {media_id}",
                client_name=self._client_name,
            ) from e

    # ── Health Check ──────────────────────────────────────────────────

    def health_check(self) -> bool:
        """Verify AniList is reachable with a one-item page request."""
        try:
            self.execute("query { Page(perPage: 1) { pageInfo { total } } }", operation="health_check")
            return True
        except Exception:
            return False

    # ── Private Parsers ───────────────────────────────────────────────

    @staticmethod
    def _parse_page_info(raw: dict[str, Any]) -> PageInfo:
        """Parse raw `pageInfo` JSON into PageInfo."""
        return PageInfo(
            total=raw["total"],
            per_page=raw.get("perPage") or 0,
            current_page=raw.get("currentPage") or 1,
            last_page=raw["lastPage"],
            has_next_page=bool(raw.get("hasNextPage")),
        )

    @staticmethod
    def _parse_media(raw: dict[str, Any]) -> MediaSummary:
        """Parse raw AniList media JSON into MediaSummary."""
        title = raw.get("title") or {}
        cover = raw.get("coverImage") or {}
        return MediaSummary(
            id=raw["id"],
            title_romaji=title.get("romaji"),
            title_english=title.get("english"),
            description=raw.get("description"),
            cover_large=cover.get("large"),
            cover_extra_large=cover.get("extraLarge"),
            start_date=FuzzyDate(**(raw.get("startDate") or {})),
            end_date=FuzzyDate(**(raw.get("endDate") or {})),
            episodes=raw.get("episodes"),
            genres=raw.get("genres") or [],
            average_score=raw.get("averageScore"),
            studios=[s["name"] for s in (raw.get("studios") or {}).get("nodes") or [] if s.get("name")],
            tags=[MediaTag(name=t["name"], category=t.get("category")) for t in raw.get("tags") or []],
            site_url=raw.get("siteUrl"),
            format=raw.get("format"),
            season=raw.get("season"),
            season_year=raw.get("seasonYear"),
        )

    @staticmethod
    def _parse_node(raw: dict[str, Any]) -> MediaNode:
        """Parse a relation node (or the subject) into MediaNode."""
        title = raw.get("title") or {}
        cover = raw.get("coverImage") or {}
        return MediaNode(
            id=raw["id"],
            title_romaji=title.get("romaji"),
            title_english=title.get("english"),
            cover_large=cover.get("large"),
            cover_extra_large=cover.get("extraLarge"),
            start_year=(raw.get("startDate") or {}).get("year"),
            format=raw.get("format"),
        )
