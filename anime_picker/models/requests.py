"""Request-side models: query-string parsing and the sampling filter."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from anime_picker.models.api_schemas import FuzzyDate
from anime_picker.utils.exceptions import InputValidationError

DEFAULT_MIN_YEAR = 1960
DEFAULT_MAX_YEAR = 2025


class RandomAnimeQuery(BaseModel):
    """Query string of `GET /api/random`.

    Attributes:
        start_year: First year of the range (inclusive), optional.
        end_year: Last year of the range (inclusive), optional.
    """
    start_year: Optional[int] = Field(default=None, description="Inclusive start year")
    end_year: Optional[int] = Field(default=None, description="Inclusive end year")


class MediaFilter(BaseModel):
    """Inclusive year range used to filter media by start date.

    Build it through `MediaFilter.create` so bounds are checked before
    any request leaves the process.
    """
    model_config = ConfigDict(frozen=True)

    start_year: int
    end_year: int

    @classmethod
    def create(
        cls,
        start_year: int,
        end_year: int,
        min_year: int = DEFAULT_MIN_YEAR,
        max_year: int = DEFAULT_MAX_YEAR,
    ) -> MediaFilter:
        """Validate a year range and return an immutable filter.

        Raises:
            InputValidationError: If the range is inverted or out of bounds.
        """
        if start_year > end_year:
            raise InputValidationError("Start year must be less than or equal to end year!")
        if start_year < min_year or end_year > max_year:
            raise InputValidationError(f"Please select years between {min_year} and {max_year}!")
        return cls(start_year=start_year, end_year=end_year)

    @property
    def start_date(self) -> int:
        """January 1st of the start year as FuzzyDateInt."""
        return FuzzyDate.to_int(self.start_year, 1, 1)

    @property
    def end_date(self) -> int:
        """December 31st of the end year as FuzzyDateInt."""
        return FuzzyDate.to_int(self.end_year, 12, 31)

    @property
    def after_date(self) -> int:
        """Exclusive lower bound sent as `startDate_greater`.

        Sits below YYYY0000 so year-only dates in the start year still match.
        """
        return self.start_year * 10000 - 1

    @property
    def before_date(self) -> int:
        """Exclusive upper bound sent as `startDate_lesser`."""
        return (self.end_year + 1) * 10000
