"""Unit tests for the timeline builder."""
from unittest.mock import MagicMock

import pytest

from anime_picker.api_clients.anilist_client import AniListClient
from anime_picker.models.api_schemas import MediaNode, MediaRelations, RelationEdge, TimelineEntry
from anime_picker.services.timeline_builder import (
    TimelineBuilder,
    TimelineStatus,
    fetch_timeline,
    filter_relations,
    format_relation_type,
    parse_media_id,
    sort_entries,
)
from anime_picker.utils.exceptions import GatewayProtocolError, InputValidationError


def _node(media_id, year=None):
    return MediaNode(id=media_id, title_romaji=f"Anime {media_id}", start_year=year)


def _edge(relation_type, media_id, year=None):
    return RelationEdge(relation_type=relation_type, node=_node(media_id, year))


@pytest.fixture
def mock_client():
    return MagicMock(spec=AniListClient)


@pytest.fixture
def builder(mock_client):
    return TimelineBuilder(mock_client)


class TestBuild:
    """Tests for TimelineBuilder.build."""

    def test_orders_entries_by_year_with_current_flag(self, builder, mock_client):
        mock_client.fetch_media_relations.return_value = MediaRelations(
            subject=_node(10, 2015),
            relations=[
                _edge("SEQUEL", 11, 2018),
                _edge("PREQUEL", 9, 2012),
                _edge("SIDE_STORY", 12, None),
            ],
        )

        result = builder.build(10)

        assert result.status is TimelineStatus.SUCCESS
        assert result.relation_count == 3
        assert [e.media.id for e in result.entries] == [9, 10, 11, 12]
        current = [e for e in result.entries if e.is_current]
        assert len(current) == 1
        assert current[0].relation_type == "CURRENT"
        assert result.message == "Found 3 related anime in this series"
        mock_client.fetch_media_relations.assert_called_once_with(10)

    def test_irrelevant_relations_are_dropped(self, builder, mock_client):
        mock_client.fetch_media_relations.return_value = MediaRelations(
            subject=_node(10, 2015),
            relations=[_edge("CHARACTER", 20, 2010), _edge("ADAPTATION", 21, 2011), _edge("SEQUEL", 11, 2018)],
        )

        result = builder.build("10")

        assert result.relation_count == 1
        assert [e.media.id for e in result.entries] == [10, 11]

    def test_only_irrelevant_relations_is_standalone(self, builder, mock_client):
        mock_client.fetch_media_relations.return_value = MediaRelations(
            subject=_node(10, 2015),
            relations=[_edge("CHARACTER", 20, 2010)],
        )

        result = builder.build(10)

        assert result.status is TimelineStatus.NO_RELATIONS
        assert result.entries == []
        assert result.subject.id == 10
        assert result.message == "This anime has no related series"

    @pytest.mark.parametrize("media_id", [None, "", "   "])
    def test_missing_id_is_no_subject(self, builder, mock_client, media_id):
        result = builder.build(media_id)

        assert result.status is TimelineStatus.NO_SUBJECT
        assert result.subject is None
        mock_client.fetch_media_relations.assert_not_called()

    def test_fetch_error_propagates_without_retry(self, builder, mock_client):
        mock_client.fetch_media_relations.side_effect = GatewayProtocolError("API Error: Not Found.")

        with pytest.raises(GatewayProtocolError):
            builder.build(10)
        assert mock_client.fetch_media_relations.call_count == 1


class TestHelpers:
    """Tests for the module-level timeline helpers."""

    def test_unknown_year_sorts_last(self):
        entries = [
            TimelineEntry(media=_node(1, 2020), relation_type="SEQUEL"),
            TimelineEntry(media=_node(2, None), relation_type="SIDE_STORY"),
            TimelineEntry(media=_node(3, 2010), relation_type="PREQUEL"),
        ]
        assert [e.media.start_year for e in sort_entries(entries)] == [2010, 2020, None]

    def test_ties_keep_edge_order(self):
        entries = [
            TimelineEntry(media=_node(1, 2012), relation_type="CURRENT", is_current=True),
            TimelineEntry(media=_node(2, 2012), relation_type="SIDE_STORY"),
            TimelineEntry(media=_node(3, 2012), relation_type="SPIN_OFF"),
        ]
        assert [e.media.id for e in sort_entries(entries)] == [1, 2, 3]

    def test_filter_relations(self):
        edges = [_edge("CHARACTER", 1), _edge("SEQUEL", 2)]
        assert [e.relation_type for e in filter_relations(edges)] == ["SEQUEL"]

    @pytest.mark.parametrize(
        "relation_type, label",
        [
            ("SEQUEL", "Sequel"),
            ("PARENT", "Parent Story"),
            ("SPIN_OFF", "Spin-off"),
            ("SUMMARY", "SUMMARY"),
        ],
    )
    def test_format_relation_type(self, relation_type, label):
        assert format_relation_type(relation_type) == label

    def test_parse_media_id(self):
        assert parse_media_id("1535") == 1535
        assert parse_media_id(1535) == 1535
        assert parse_media_id(None) is None
        with pytest.raises(InputValidationError):
            parse_media_id("abc")
        with pytest.raises(InputValidationError):
            parse_media_id("\u00b2")
        with pytest.raises(InputValidationError):
            parse_media_id("\u0661\u0662")
        with pytest.raises(InputValidationError):
            parse_media_id(0)


class TestFetchTimeline:
    """Tests for the fetch_timeline helper."""

    def test_delegates_to_builder(self, mock_client):
        mock_client.fetch_media_relations.return_value = MediaRelations(
            subject=_node(1, 2000), relations=[_edge("SPIN_OFF", 2, 2003)]
        )

        result = fetch_timeline(mock_client, "1")

        assert result.status is TimelineStatus.SUCCESS
        assert [e.relation_type for e in result.entries] == ["CURRENT", "SPIN_OFF"]
