"""Pydantic models for AniList GraphQL response validation.

The AniList client parses raw `data.Page` and `data.Media` payloads into
these flat, immutable models so the sampler and the timeline builder never
touch nested JSON directly.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FuzzyDate(BaseModel):
    """AniList date whose components may each be missing."""
    model_config = ConfigDict(frozen=True)

    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None

    @staticmethod
    def to_int(year: int, month: int, day: int) -> int:
        """Encode a date as the 8-digit FuzzyDateInt used in filters.

        >>> FuzzyDate.to_int(1999, 1, 1)
        19990101
        """
        return year * 10000 + month * 100 + day


class MediaTag(BaseModel):
    """A media tag; `category` drives theme/demographic derivation."""
    model_config = ConfigDict(frozen=True)

    name: str
    category: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════
# Query A — Page(media by date range)
# ══════════════════════════════════════════════════════════════════════

class PageInfo(BaseModel):
    """Shape of the result set as reported by one Page request."""
    model_config = ConfigDict(frozen=True)

    total: int = 0
    per_page: int = 0
    current_page: int = 1
    last_page: int = 0
    has_next_page: bool = False


class MediaSummary(BaseModel):
    """Snapshot of one sampled anime."""
    model_config = ConfigDict(frozen=True)

    id: int
    title_romaji: Optional[str] = None
    title_english: Optional[str] = None
    description: Optional[str] = None   # raw, may contain markup
    cover_large: Optional[str] = None
    cover_extra_large: Optional[str] = None
    start_date: FuzzyDate = Field(default_factory=FuzzyDate)
    end_date: FuzzyDate = Field(default_factory=FuzzyDate)
    episodes: Optional[int] = None
    genres: list[str] = Field(default_factory=list)
    average_score: Optional[int] = Field(default=None, ge=0, le=100)
    studios: list[str] = Field(default_factory=list)
    tags: list[MediaTag] = Field(default_factory=list)
    site_url: Optional[str] = None
    format: Optional[str] = None
    season: Optional[str] = None
    season_year: Optional[int] = None

    @property
    def display_title(self) -> str:
        return self.title_english or self.title_romaji or "Unknown"

    @property
    def cover_image(self) -> Optional[str]:
        return self.cover_extra_large or self.cover_large

    @property
    def studio(self) -> Optional[str]:
        return self.studios[0] if self.studios else None


class MediaPage(BaseModel):
    """One page of Query A results."""
    page_info: PageInfo
    media: list[MediaSummary] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════
# Query B — Media(id) with relations
# ══════════════════════════════════════════════════════════════════════

class MediaNode(BaseModel):
    """Lightweight media record used on timeline cards."""
    model_config = ConfigDict(frozen=True)

    id: int
    title_romaji: Optional[str] = None
    title_english: Optional[str] = None
    cover_large: Optional[str] = None
    cover_extra_large: Optional[str] = None
    start_year: Optional[int] = None
    format: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title_english or self.title_romaji or "Unknown"

    @property
    def cover_image(self) -> Optional[str]:
        return self.cover_extra_large or self.cover_large


class RelationEdge(BaseModel):
    """Typed link from the subject media to a related media."""
    model_config = ConfigDict(frozen=True)

    relation_type: str
    node: MediaNode


class MediaRelations(BaseModel):
    """Query B result: the subject plus all its declared relation edges."""
    subject: MediaNode
    relations: list[RelationEdge] = Field(default_factory=list)


class TimelineEntry(BaseModel):
    """One card on the timeline, either the subject or a related media."""
    model_config = ConfigDict(frozen=True)

    media: MediaNode
    relation_type: str
    is_current: bool = False
