"""HTTP client for interacting with GitHub's REST API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

import httpx

from .config import GitHubSettings
from .errors import AnalyticsError, ApiError, NotFound, RateLimited
from .notifications import Notifier
from .rate_limiter import RateLimiter

LOGGER = logging.getLogger(__name__)

ACCEPT_HEADER = "application/vnd.github.v3+json"


def request_headers(token: str | None) -> dict[str, str]:
    """Headers sent with every request of one pipeline run."""

    headers = {"Accept": ACCEPT_HEADER}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


class GitHubRestClient:
    """Light-weight REST client that classifies GitHub failures.

    Every failure is reported to the notifier before it is raised, which makes
    the client the single error reporting funnel of the pipeline.
    """

    def __init__(
        self,
        settings: GitHubSettings,
        client: httpx.AsyncClient | None = None,
        *,
        notifier: Notifier | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.api_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": "repo-analytics"},
            timeout=settings.request_timeout,
        )
        self._owns_client = client is None
        self._notifier = notifier or Notifier()
        self._rate_limiter = rate_limiter or RateLimiter()

    async def __aenter__(self) -> "GitHubRestClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Issue a GET request and return the decoded JSON body."""

        try:
            return await self._get(path, params, headers)
        except AnalyticsError as exc:
            self._report(exc)
            raise

    async def _get(
        self,
        path: str,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = await self._client.get(
                url,
                params=dict(params) if params else None,
                headers=dict(headers) if headers is not None else request_headers(self._settings.token),
            )
        except httpx.RequestError as exc:
            LOGGER.warning("GitHub request error for %s: %s", path, exc)
            raise ApiError(f"Network error: {exc}") from exc

        await self._rate_limiter.record_headers(response.headers)

        if response.status_code == 403:
            raise _rate_limited(response)
        if response.status_code == 404:
            raise NotFound("Repository not found. Please check the repository name.")
        if not response.is_success:
            raise ApiError(
                f"GitHub API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                reason=response.reason_phrase,
            )
        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                f"GitHub API returned an invalid JSON body for {path}",
                status_code=response.status_code,
                reason=response.reason_phrase,
            ) from exc

    def _report(self, exc: AnalyticsError) -> None:
        if exc.notified:
            return
        self._notifier.notify(exc.message)
        exc.notified = True


def _rate_limited(response: httpx.Response) -> RateLimited:
    value = response.headers.get("X-RateLimit-Reset")
    if value:
        try:
            reset_at = datetime.fromtimestamp(int(value)).astimezone()
        except (TypeError, ValueError, OverflowError):
            reset_at = None
        if reset_at is not None:
            return RateLimited(
                f"Rate limit exceeded. Resets at {reset_at.strftime('%H:%M:%S')}",
                reset_at=reset_at,
            )
    return RateLimited("Rate limit exceeded. Please try again later or add a GitHub token.")


__all__ = ["GitHubRestClient", "request_headers", "ACCEPT_HEADER"]
