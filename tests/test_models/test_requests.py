"""Unit tests for request-side models."""
import pytest
from pydantic import ValidationError

from anime_picker.models.requests import MediaFilter, RandomAnimeQuery
from anime_picker.utils.exceptions import InputValidationError


class TestMediaFilter:
    """Tests for MediaFilter.create and its date encoding."""

    def test_dates_cover_whole_years(self):
        media_filter = MediaFilter.create(1995, 2003)
        assert media_filter.start_date == 19950101
        assert media_filter.end_date == 20031231

    def test_single_year_range(self):
        media_filter = MediaFilter.create(2025, 2025)
        assert (media_filter.start_date, media_filter.end_date) == (20250101, 20251231)

    @pytest.mark.parametrize("fuzzy_date", [19950000, 19950101, 20031231, 20030000])
    def test_exclusive_gateway_bounds_admit_edge_dates(self, fuzzy_date):
        media_filter = MediaFilter.create(1995, 2003)
        assert media_filter.after_date < fuzzy_date < media_filter.before_date

    @pytest.mark.parametrize("fuzzy_date", [19941231, 20040000, 20040101])
    def test_exclusive_gateway_bounds_reject_outside_dates(self, fuzzy_date):
        media_filter = MediaFilter.create(1995, 2003)
        assert not media_filter.after_date < fuzzy_date < media_filter.before_date

    def test_inverted_range(self):
        with pytest.raises(InputValidationError, match="less than or equal"):
            MediaFilter.create(2001, 2000)

    @pytest.mark.parametrize("start, end", [(1959, 2000), (2000, 2026)])
    def test_out_of_bounds(self, start, end):
        with pytest.raises(InputValidationError) as exc_info:
            MediaFilter.create(start, end)
        assert exc_info.value.status_code == 422

    def test_custom_bounds(self):
        assert MediaFilter.create(1950, 1955, min_year=1940, max_year=2030).start_year == 1950

    def test_is_immutable(self):
        media_filter = MediaFilter.create(2000, 2001)
        with pytest.raises(ValidationError):
            media_filter.start_year = 1990


class TestRandomAnimeQuery:
    """Tests for RandomAnimeQuery parsing."""

    def test_coerces_query_strings(self):
        query = RandomAnimeQuery(start_year="1990", end_year="1999")
        assert (query.start_year, query.end_year) == (1990, 1999)

    def test_defaults_to_none(self):
        query = RandomAnimeQuery()
        assert query.start_year is None and query.end_year is None

    def test_rejects_non_numeric(self):
        with pytest.raises(ValidationError):
            RandomAnimeQuery(start_year="nineties")
