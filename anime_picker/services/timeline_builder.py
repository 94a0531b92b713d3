"""Timeline builder: orders an anime and its related entries by release year.

Per call the builder moves through:

    NO_SUBJECT  (no id given, nothing fetched)
    fetching -> SUCCESS       (at least one relevant relation)
             -> NO_RELATIONS  (standalone series)
             -> error         (GatewayProtocolError propagates, no retry)
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field

import structlog

from anime_picker.api_clients.anilist_client import AniListClient
from anime_picker.models.api_schemas import MediaNode, RelationEdge, TimelineEntry
from anime_picker.utils.exceptions import InputValidationError

logger = structlog.get_logger(__name__)

CURRENT = "CURRENT"

RELEVANT_RELATION_TYPES = ("SEQUEL", "PREQUEL", "SIDE_STORY", "ALTERNATIVE", "PARENT", "SPIN_OFF")

RELATION_LABELS = {
    "SEQUEL": "Sequel",
    "PREQUEL": "Prequel",
    "SIDE_STORY": "Side Story",
    "ALTERNATIVE": "Alternative",
    "PARENT": "Parent Story",
    "SPIN_OFF": "Spin-off",
}


class TimelineStatus(str, enum.Enum):
    NO_SUBJECT = "no_subject"
    SUCCESS = "success"
    NO_RELATIONS = "no_relations"


@dataclass
class TimelineResult:
    """Outcome of one timeline build.

    `entries` is empty unless status is SUCCESS; `subject` is None only
    for NO_SUBJECT.
    """
    status: TimelineStatus
    subject: MediaNode | None = None
    entries: list[TimelineEntry] = field(default_factory=list)
    relation_count: int = 0

    @property
    def message(self) -> str:
        if self.status is TimelineStatus.NO_SUBJECT:
            return "No anime selected. Please generate an anime from the main page first."
        if self.status is TimelineStatus.NO_RELATIONS:
            return "This anime has no related series"
        return f"Found {self.relation_count} related anime in this series"


def format_relation_type(relation_type: str) -> str:
    """Human label for a relation type; unknown types are returned as-is."""
    return RELATION_LABELS.get(relation_type, relation_type)


def filter_relations(edges: list[RelationEdge]) -> list[RelationEdge]:
    """Keep only the relation kinds shown on the timeline, in edge order."""
    return [edge for edge in edges if edge.relation_type in RELEVANT_RELATION_TYPES]


def sort_entries(entries: list[TimelineEntry]) -> list[TimelineEntry]:
    """Stable sort by start year; entries without a year go last."""
    return sorted(
        entries,
        key=lambda e: (e.media.start_year is None, e.media.start_year or 0),
    )


def parse_media_id(media_id: int | str | None) -> int | None:
    """Normalize an id given as int or numeric string; blank means no subject.

    Raises:
        InputValidationError: If the value is not a positive integer.
    """
    if media_id is None:
        return None
    if isinstance(media_id, str):
        media_id = media_id.strip()
        if not media_id:
            return None
        if not (media_id.isascii() and media_id.isdigit()):
            raise InputValidationError(f"Invalid anime id: {media_id!r}")
        media_id = int(media_id)
    if isinstance(media_id, bool) or media_id <= 0:
        raise InputValidationError(f"Invalid anime id: {media_id!r}")
    return media_id


class TimelineBuilder:
    """Builds a chronological timeline of an anime's sequels, prequels and side stories.

    Args:
        client: AniList client used for the relations query.
    """

    def __init__(self, client: AniListClient) -> None:
        self._client = client

    def build(self, media_id: int | str | None) -> TimelineResult:
        """Fetch relations for `media_id` and return the ordered timeline.

        Raises:
            InputValidationError: If `media_id` is not a valid id.
            GatewayProtocolError: If the fetch fails.
        """
        parsed_id = parse_media_id(media_id)
        if parsed_id is None:
            return TimelineResult(status=TimelineStatus.NO_SUBJECT)

        media = self._client.fetch_media_relations(parsed_id)
        relevant = filter_relations(media.relations)

        if not relevant:
            logger.info("timeline_no_relations", media_id=parsed_id, edges=len(media.relations))
            return TimelineResult(status=TimelineStatus.NO_RELATIONS, subject=media.subject)

        entries = [TimelineEntry(media=media.subject, relation_type=CURRENT, is_current=True)]
        entries.extend(
            TimelineEntry(media=edge.node, relation_type=edge.relation_type) for edge in relevant
        )

        logger.info(
            "timeline_built",
            media_id=parsed_id,
            edges=len(media.relations),
            relevant=len(relevant),
        )
        return TimelineResult(
            status=TimelineStatus.SUCCESS,
            subject=media.subject,
            entries=sort_entries(entries),
            relation_count=len(relevant),
        )


def fetch_timeline(client: AniListClient, media_id: int | str | None) -> TimelineResult:
    """One-shot helper around TimelineBuilder.build."""
    return TimelineBuilder(client).build(media_id)
