"""Abstract base GraphQL client with rate limiting, transport retry and structured logging.

The AniList client inherits from this class. Every transport or protocol
failure is re-classified here into `GatewayProtocolError`, so callers
only ever see the application exception hierarchy.

Features:
- Persistent connection pooling via httpx.Client
- Optional transport retry with exponential backoff (429, 5xx)
- Per-client rate limiting (configurable delay between requests)
- GraphQL `errors` array surfaced as the first reported message
- Structured logging for every request/response
"""
from __future__ import annotations

import json
import math
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx
import structlog

from anime_picker.utils.exceptions import GatewayProtocolError, GatewayRateLimitError

logger = structlog.get_logger(__name__)

# HTTP status codes that trigger automatic retry
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# Seconds to wait on a 429 without a usable Retry-After header
DEFAULT_RETRY_AFTER = 2.0


class BaseGraphQLClient(ABC):
    """Abstract base class for GraphQL-over-HTTP clients.

    Args:
        endpoint: The GraphQL endpoint URL.
        rate_limit: Minimum seconds between consecutive requests.
        timeout: HTTP timeout in seconds; None keeps the httpx default.
        max_retries: Transport attempts per request (1 disables retry).
        headers: Additional default headers to send with every request.
    """

    def __init__(
        self,
        endpoint: str,
        rate_limit: float = 0.0,
        timeout: float | None = None,
        max_retries: int = 1,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._rate_limit = rate_limit
        self._max_retries = max(1, max_retries)
        self._last_request_time: float = 0.0
        self._client_name = self.__class__.__name__

        default_headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "AnimePicker/1.0 (random-anime-generator)",
        }
        if headers:
            default_headers.update(headers)

        client_kwargs: dict[str, Any] = {
            "headers": default_headers,
            "follow_redirects": True,
        }
        if timeout is not None:
            client_kwargs["timeout"] = httpx.Timeout(timeout)
        self._client = httpx.Client(**client_kwargs)

    def close(self) -> None:
        """Close the underlying HTTP client and release connections."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ── Public API ────────────────────────────────────────────────────

    def execute(self, query: str, variables: dict[str, Any] | None = None, operation: str = "query") -> dict:
        """POST a GraphQL document and return its `data` object.

        Args:
            query: GraphQL document.
            variables: Query variables.
            operation: Short name used in log events.

        Returns:
            The response's `data` dict.

        Raises:
            GatewayProtocolError: On non-2xx status, unparsable JSON,
                a missing `data` object or a non-empty `errors` array.
            GatewayRateLimitError: When rate limited after all attempts.
        """
        payload = {"query": query, "variables": variables or {}}
        body = self._request_with_retry(payload, operation)

        errors = body.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message", "Unknown error") if isinstance(first, dict) else str(first)
            logger.warning("gateway_graphql_error", client=self._client_name, operation=operation, error=message)
            raise GatewayProtocolError(
                message=f"API Error: {message}",
                client_name=self._client_name,
            )

        data = body.get("data")
        if not isinstance(data, dict):
            raise GatewayProtocolError(
                message=f"{self._client_name}: response for {operation} has no data object",
                client_name=self._client_name,
            )
        return data

    # ── Internal Methods ──────────────────────────────────────────────

    def _request_with_retry(self, payload: dict[str, Any], operation: str) -> dict:
        """POST with exponential backoff on 429/5xx and transport errors.

        Args:
            payload: JSON body `{query, variables}`.
            operation: Short name used in log events.

        Returns:
            Parsed JSON response body.
        """
        last_exception: Exception | None = None

        for attempt in range(1, self._max_retries + 1):
            try:
                self._rate_limit_wait()

                logger.info(
                    "gateway_request",
                    client=self._client_name,
                    operation=operation,
                    variables=payload["variables"],
                    attempt=attempt,
                )

                start = time.monotonic()
                response = self._client.post(self._endpoint, json=payload)
                duration_ms = round((time.monotonic() - start) * 1000)

                logger.info(
                    "gateway_response",
                    client=self._client_name,
                    operation=operation,
                    status=response.status_code,
                    duration_ms=duration_ms,
                )

                if response.status_code == 429:
                    retry_after = self._retry_after(response)
                    if attempt < self._max_retries:
                        logger.warning(
                            "rate_limited",
                            client=self._client_name,
                            retry_after=retry_after,
                            attempt=attempt,
                        )
                        time.sleep(retry_after)
                        continue
                    raise GatewayRateLimitError(
                        client_name=self._client_name, retry_after=retry_after
                    )

                if response.status_code in RETRYABLE_STATUS_CODES and attempt < self._max_retries:
                    backoff = 2 ** (attempt - 1)  # 1s, 2s, 4s
                    logger.warning(
                        "retryable_error",
                        client=self._client_name,
                        status=response.status_code,
                        backoff=backoff,
                        attempt=attempt,
                    )
                    time.sleep(backoff)
                    continue

                if response.status_code >= 400:
                    raise GatewayProtocolError(
                        message=self._error_message(response, operation),
                        client_name=self._client_name,
                        upstream_status=response.status_code,
                    )

                return self._parse_json(response, operation)

            except GatewayProtocolError:
                raise

            except httpx.TimeoutException as e:
                last_exception = e
                if attempt < self._max_retries:
                    backoff = 2 ** (attempt - 1)
                    logger.warning(
                        "timeout_retry",
                        client=self._client_name,
                        operation=operation,
                        backoff=backoff,
                        attempt=attempt,
                    )
                    time.sleep(backoff)
                    continue
                raise GatewayProtocolError(
                    message=f"{self._client_name}: request timed out for {operation}",
                    client_name=self._client_name,
                    status_code=504,
                ) from e

            except httpx.HTTPError as e:
                last_exception = e
                if attempt < self._max_retries:
                    backoff = 2 ** (attempt - 1)
                    logger.warning(
                        "http_error_retry",
                        client=self._client_name,
                        error=str(e),
                        backoff=backoff,
                        attempt=attempt,
                    )
                    time.sleep(backoff)
                    continue
                raise GatewayProtocolError(
                    message=f"{self._client_name}: transport error for {operation}: {e}",
                    client_name=self._client_name,
                ) from e

        raise GatewayProtocolError(
            message=f"{self._client_name}: All {self._max_retries} attempts exhausted for {operation}",
            client_name=self._client_name,
        ) from last_exception

    def _parse_json(self, response: httpx.Response, operation: str) -> dict:
        """Decode a response body that must be a JSON object."""
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise GatewayProtocolError(
                message=f"{self._client_name}: unparsable JSON for {operation}",
                client_name=self._client_name,
                upstream_status=response.status_code,
            ) from e
        if not isinstance(body, dict):
            raise GatewayProtocolError(
                message=f"{self._client_name}: unexpected response body for {operation}",
                client_name=self._client_name,
                upstream_status=response.status_code,
            )
        return body

    def _error_message(self, response: httpx.Response, operation: str) -> str:
        """Prefer the GraphQL error message AniList puts in 4xx bodies."""
        try:
            errors = response.json().get("errors") or []
            if errors and isinstance(errors[0], dict) and errors[0].get("message"):
                return f"API Error: {errors[0]['message']}"
        except (ValueError, AttributeError, KeyError, TypeError):
            pass
        return f"{self._client_name}: HTTP {response.status_code} for {operation}"

    @staticmethod
    def _retry_after(response: httpx.Response) -> float:
        """Seconds to wait from a Retry-After header in delta or HTTP-date form."""
        value = response.headers.get("Retry-After")
        if value is None:
            return DEFAULT_RETRY_AFTER
        try:
            seconds = float(value)
        except ValueError:
            pass
        else:
            return max(seconds, 0.0) if math.isfinite(seconds) else DEFAULT_RETRY_AFTER
        try:
            retry_at = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return DEFAULT_RETRY_AFTER
        if retry_at.tzinfo is None:
            retry_at = retry_at.replace(tzinfo=timezone.utc)
        return max((retry_at - datetime.now(timezone.utc)).total_seconds(), 0.0)

    def _rate_limit_wait(self) -> None:
        """Enforce minimum delay between consecutive requests."""
        if self._rate_limit <= 0:
            return

        now = time.monotonic()
        elapsed = now - self._last_request_time
        if elapsed < self._rate_limit:
            sleep_time = self._rate_limit - elapsed
            logger.debug(
                "rate_limit_wait",
                client=self._client_name,
                sleep_seconds=round(sleep_time, 3),
            )
            time.sleep(sleep_time)

        self._last_request_time = time.monotonic()

    @abstractmethod
    def health_check(self) -> bool:
        """Verify the API is reachable. Used by /health endpoint.

        Returns:
            True if API is healthy, False otherwise.
        """
        ...
