"""Random anime sampler over AniList's paginated media search.

AniList only exposes fixed-size pages, so one anime is picked in four
steps, all wrapped in a bounded retry loop:

1. Count probe: request page 1 to learn `total` and `lastPage`.
2. Page selector: draw a page uniformly from `[1, lastPage]`.
3. Page fetch: request that page with the same filter and sort.
4. Item picker: draw an item uniformly from the returned page.

Known bias: the pick is uniform over pages, then over items within the
page, not over the whole result set. A short last page gives its items a
higher chance, and the probe and the fetch are two separate reads of a
live dataset, so a page may shift between them. Both are accepted.

Usage:
    sampler = RandomSampler(anilist_client)
    anime = sampler.sample(1990, 1999)
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable

import structlog

from anime_picker.api_clients.anilist_client import AniListClient
from anime_picker.models.api_schemas import MediaSummary
from anime_picker.models.requests import DEFAULT_MAX_YEAR, DEFAULT_MIN_YEAR, MediaFilter
from anime_picker.utils.exceptions import (
    EmptyPageError,
    GatewayProtocolError,
    NoResultsError,
    SamplingExhaustedError,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How many probe-fetch-pick attempts to make and which errors allow another.

    Attributes:
        max_attempts: Total attempts, including the first one.
        retryable: Exception types that consume an attempt and retry.
            GatewayRateLimitError is a GatewayProtocolError, so it is
            retried as well.
    """
    max_attempts: int = 5
    retryable: tuple[type[Exception], ...] = (EmptyPageError, GatewayProtocolError)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def is_retryable(self, error: Exception) -> bool:
        """Whether `error` should consume an attempt rather than abort."""
        return isinstance(error, self.retryable)


@dataclass
class SamplerEvent:
    """Structured record of something the sampler did.

    `name` is one of: probe, page_selected, picked, retry, exhausted.
    """
    name: str
    attempt: int
    max_attempts: int
    page: int | None = None
    total: int | None = None
    last_page: int | None = None
    error: Exception | None = None
    extra: dict = field(default_factory=dict)


SamplerEventHandler = Callable[[SamplerEvent], None]


class RandomSampler:
    """Picks one random anime from all anime matching a year range.

    Args:
        client: AniList client used for both page requests.
        per_page: Page size for probe and fetch.
        sort: AniList MediaSort; fixed per request so "page N" is stable.
        retry_policy: Attempt budget and retryable error kinds.
        rng: Random source (inject a seeded `random.Random` in tests).
        on_event: Optional callback receiving every SamplerEvent.
        min_year: Lower bound accepted for the start year.
        max_year: Upper bound accepted for the end year.
    """

    def __init__(
        self,
        client: AniListClient,
        per_page: int = 50,
        sort: str = "POPULARITY_DESC",
        retry_policy: RetryPolicy | None = None,
        rng: random.Random | None = None,
        on_event: SamplerEventHandler | None = None,
        min_year: int = DEFAULT_MIN_YEAR,
        max_year: int = DEFAULT_MAX_YEAR,
    ) -> None:
        self._client = client
        self._per_page = per_page
        self._sort = sort
        self._retry_policy = retry_policy or RetryPolicy()
        self._rng = rng or random.Random()
        self._on_event = on_event
        self._min_year = min_year
        self._max_year = max_year

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def sample(self, start_year: int, end_year: int, max_retries: int | None = None) -> MediaSummary:
        """Return one anime whose start date lies in `[start_year, end_year]`.

        Args:
            start_year: Inclusive first year.
            end_year: Inclusive last year.
            max_retries: Overrides the policy's attempt budget for this call.

        Returns:
            The randomly chosen MediaSummary.

        Raises:
            InputValidationError: Range inverted or out of bounds (no request made).
            NoResultsError: The range matches no anime. Never retried.
            SamplingExhaustedError: Every attempt failed; wraps the last error.
        """
        media_filter = MediaFilter.create(start_year, end_year, self._min_year, self._max_year)
        policy = self._retry_policy
        if max_retries is not None:
            policy = RetryPolicy(max_attempts=max_retries, retryable=policy.retryable)

        last_error: Exception | None = None
        for attempt in range(1, policy.max_attempts + 1):
            try:
                return self._attempt(media_filter, attempt, policy.max_attempts)
            except NoResultsError:
                raise
            except Exception as e:
                if not policy.is_retryable(e):
                    raise
                last_error = e
                logger.warning(
                    "sampler_retry",
                    attempt=attempt,
                    max_attempts=policy.max_attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self._emit(SamplerEvent("retry", attempt, policy.max_attempts, error=e))

        logger.error(
            "sampler_exhausted",
            attempts=policy.max_attempts,
            start_year=start_year,
            end_year=end_year,
            last_error=str(last_error),
        )
        self._emit(SamplerEvent("exhausted", policy.max_attempts, policy.max_attempts, error=last_error))
        raise SamplingExhaustedError(attempts=policy.max_attempts, last_error=last_error) from last_error

    def _attempt(self, media_filter: MediaFilter, attempt: int, max_attempts: int) -> MediaSummary:
        """Run probe, page selection, page fetch and item pick once."""
        probe = self._client.fetch_media_page(media_filter, page=1, per_page=self._per_page, sort=self._sort)
        total = probe.page_info.total
        last_page = probe.page_info.last_page
        self._emit(SamplerEvent("probe", attempt, max_attempts, total=total, last_page=last_page))

        if total == 0:
            raise NoResultsError(media_filter.start_year, media_filter.end_year)
        if last_page < 1:
            raise GatewayProtocolError(message=f"Invalid response: lastPage={last_page} with total={total}")

        page = self._rng.randint(1, last_page)
        self._emit(SamplerEvent("page_selected", attempt, max_attempts, page=page, last_page=last_page))

        result = self._client.fetch_media_page(media_filter, page=page, per_page=self._per_page, sort=self._sort)
        if not result.media:
            raise EmptyPageError(page)

        picked = result.media[self._rng.randrange(len(result.media))]
        logger.info(
            "sampler_picked",
            media_id=picked.id,
            page=page,
            last_page=last_page,
            total=total,
            attempt=attempt,
        )
        self._emit(SamplerEvent("picked", attempt, max_attempts, page=page, total=total, extra={"media_id": picked.id}))
        return picked

    def _emit(self, event: SamplerEvent) -> None:
        if self._on_event is not None:
            self._on_event(event)


def sample_random_media(
    client: AniListClient,
    start_year: int,
    end_year: int,
    max_retries: int = 5,
    **sampler_kwargs,
) -> MediaSummary:
    """One-shot helper: build a sampler with `max_retries` attempts and sample once."""
    sampler = RandomSampler(client, retry_policy=RetryPolicy(max_attempts=max_retries), **sampler_kwargs)
    return sampler.sample(start_year, end_year)
