"""Custom exception hierarchy for the random anime service.

All application-specific exceptions inherit from AnimePickerError,
enabling uniform error handling in the global error handlers.

Hierarchy:
    AnimePickerError (base)
    ├── InputValidationError        — Inverted or out-of-bound year range, bad media id
    ├── GatewayProtocolError        — AniList transport / JSON / GraphQL `errors` failures
    │   └── GatewayRateLimitError   — 429 Too Many Requests
    ├── NoResultsError              — Filter matches zero media (terminal)
    ├── EmptyPageError              — Selected page came back empty (retryable)
    └── SamplingExhaustedError      — Sampler ran out of attempts (terminal)
"""
from __future__ import annotations


class AnimePickerError(Exception):
    """Base exception for the random anime service."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


# ── Validation Errors ────────────────────────────────────────────────

class InputValidationError(AnimePickerError):
    """Raised when caller input fails validation, before any network call."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=422)


# ── Gateway Errors ───────────────────────────────────────────────────

class GatewayProtocolError(AnimePickerError):
    """Raised when the GraphQL gateway call fails.

    Covers non-2xx responses, unparsable JSON, missing response shape and
    a non-empty GraphQL `errors` array (first message is surfaced).
    """

    def __init__(
        self,
        message: str,
        client_name: str = "unknown",
        status_code: int = 502,
        upstream_status: int | None = None,
    ) -> None:
        self.client_name = client_name
        self.upstream_status = upstream_status
        super().__init__(message, status_code)


class GatewayRateLimitError(GatewayProtocolError):
    """Raised when the gateway returns 429 Too Many Requests."""

    def __init__(self, client_name: str, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(
            message=f"{client_name} API rate limit exceeded. Try again shortly.",
            client_name=client_name,
            status_code=429,
            upstream_status=429,
        )


# ── Sampling Errors ──────────────────────────────────────────────────

class NoResultsError(AnimePickerError):
    """Raised when the year range matches no media at all."""

    def __init__(self, start_year: int, end_year: int) -> None:
        self.start_year = start_year
        self.end_year = end_year
        super().__init__(
            message=f"No anime found in the year range {start_year}-{end_year}",
            status_code=404,
        )


class EmptyPageError(AnimePickerError):
    """Raised when a randomly selected page holds no media."""

    def __init__(self, page: int) -> None:
        self.page = page
        super().__init__(message=f"Empty results on page {page}", status_code=502)


class SamplingExhaustedError(AnimePickerError):
    """Raised when every sampling attempt failed.

    The last underlying error is kept on `last_error` and chained as
    `__cause__` by the sampler.
    """

    def __init__(self, attempts: int, last_error: Exception | None = None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            message="Failed to fetch anime after multiple attempts",
            status_code=502,
        )
