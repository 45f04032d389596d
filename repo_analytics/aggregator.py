"""High level orchestration of the requests behind one analytics snapshot."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Mapping

from . import endpoints, metrics
from .config import GitHubSettings, UTC
from .errors import AnalyticsError, PartialDataError
from .github_client import GitHubRestClient, request_headers
from .metrics import MetricsEstimator, RandomEstimator
from .models import AnalyticsSnapshot, RepositoryIdentifier, RepositoryMetadata, RepositoryStats
from .paginator import fetch_all

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RawRepositoryData:
    """Undigested API payloads gathered for one repository."""

    repository: dict[str, Any]
    commits: list[dict[str, Any]]
    languages: dict[str, int]
    contributors: list[dict[str, Any]]
    commit_activity: list[dict[str, Any]] | None
    pull_requests: int = 0
    profiles: list[dict[str, Any]] = field(default_factory=list)

    @property
    def open_issues(self) -> int:
        return int(self.repository.get("open_issues_count") or 0)


class RepositoryAggregator:
    """Fetches every endpoint a snapshot needs, concurrently where possible."""

    def __init__(self, client: GitHubRestClient, settings: GitHubSettings) -> None:
        self._client = client
        self._settings = settings

    async def fetch(self, identifier: RepositoryIdentifier, token: str | None = None) -> RawRepositoryData:
        headers = request_headers(token)
        full_name = identifier.full_name

        required = await _gather_required(
            repository=self._client.get(endpoints.REPOSITORY_PATH.format(full_name=full_name), headers=headers),
            commits=self._client.get(
                endpoints.COMMITS_PATH.format(full_name=full_name),
                params={"per_page": self._settings.commit_sample_size},
                headers=headers,
            ),
            languages=self._client.get(endpoints.LANGUAGES_PATH.format(full_name=full_name), headers=headers),
            contributors=fetch_all(
                self._client,
                endpoints.CONTRIBUTORS_PATH.format(full_name=full_name),
                headers=headers,
                page_size=self._settings.page_size,
            ),
            commit_activity=self._commit_activity(full_name, headers),
        )

        raw = RawRepositoryData(
            repository=_expect(required["repository"], dict, "repository"),
            commits=_expect(required["commits"], list, "commits"),
            languages=_expect(required["languages"], dict, "languages"),
            contributors=_expect(required["contributors"], list, "contributors"),
            commit_activity=required["commit_activity"],
        )
        raw.pull_requests = await self._pull_request_count(full_name, headers)

        top = metrics.rank_contributors(raw.contributors)[: self._settings.top_contributors]
        raw.profiles = list(
            await asyncio.gather(*(self._profile(item.get("login", ""), headers) for item in top))
        )
        LOGGER.debug(
            "Fetched %s: %s contributors, %s commits sampled, %s pull requests",
            full_name,
            len(raw.contributors),
            len(raw.commits),
            raw.pull_requests,
        )
        return raw

    async def _commit_activity(self, full_name: str, headers: Mapping[str, str]) -> list[dict[str, Any]] | None:
        try:
            data = await self._client.get(
                endpoints.COMMIT_ACTIVITY_PATH.format(full_name=full_name), headers=headers
            )
        except AnalyticsError as exc:
            LOGGER.warning("Commit activity unavailable for %s: %s", full_name, exc)
            return None
        # GitHub answers 202 with an empty object while the statistics are computed.
        if not isinstance(data, list):
            LOGGER.info("Commit activity for %s is still being computed", full_name)
            return None
        return data

    async def _pull_request_count(self, full_name: str, headers: Mapping[str, str]) -> int:
        try:
            data = await self._client.get(
                endpoints.SEARCH_ISSUES_PATH,
                params={"q": endpoints.pull_request_query(full_name)},
                headers=headers,
            )
        except AnalyticsError as exc:
            LOGGER.warning("Could not fetch PR count for %s: %s", full_name, exc)
            return 0
        return int((data or {}).get("total_count") or 0)

    async def _profile(self, login: str, headers: Mapping[str, str]) -> dict[str, Any]:
        if not login:
            return {}
        try:
            data = await self._client.get(endpoints.USER_PATH.format(login=login), headers=headers)
        except AnalyticsError as exc:
            LOGGER.info("Profile of %s unavailable: %s", login, exc)
            return {}
        return data if isinstance(data, dict) else {}


class AnalyticsPipeline:
    """Runs the aggregator and derives a complete :class:`AnalyticsSnapshot`."""

    def __init__(
        self,
        aggregator: RepositoryAggregator,
        settings: GitHubSettings,
        estimator: MetricsEstimator | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._settings = settings
        self._estimator = estimator or RandomEstimator()

    async def run(
        self,
        identifier: RepositoryIdentifier,
        token: str | None = None,
        *,
        now: datetime | None = None,
    ) -> AnalyticsSnapshot:
        raw = await self._aggregator.fetch(identifier, token)
        try:
            return self.derive(identifier, raw, now=now)
        except (KeyError, TypeError, ValueError) as exc:
            raise PartialDataError(f"Unexpected data for {identifier}: {exc}") from exc

    def derive(
        self,
        identifier: RepositoryIdentifier,
        raw: RawRepositoryData,
        *,
        now: datetime | None = None,
    ) -> AnalyticsSnapshot:
        now = now or datetime.now(tz=UTC)
        estimator = self._estimator

        ranked = metrics.rank_contributors(raw.contributors)
        limit = self._settings.top_contributors
        percentages = metrics.contribution_percentages(
            [int(item.get("contributions", 0)) for item in ranked], limit=limit
        )
        contributors = metrics.build_contributors(
            ranked[:limit], raw.profiles, percentages[:limit], estimator
        )

        stats = RepositoryStats(
            contributors=len(raw.contributors),
            total_commits=metrics.total_commits(raw.contributors),
            lines_of_code=metrics.estimate_lines_of_code(raw.languages),
            stars=raw.repository.get("stargazers_count", 0),
            forks=raw.repository.get("forks_count", 0),
            open_issues=raw.open_issues,
            pull_requests=raw.pull_requests,
        )
        health = metrics.health_metrics(
            raw.repository,
            contributor_count=len(raw.contributors),
            open_issues=raw.open_issues,
            pull_requests=raw.pull_requests,
            estimator=estimator,
            now=now,
        )
        return AnalyticsSnapshot(
            repository=RepositoryMetadata.from_api(identifier, raw.repository),
            stats=stats,
            languages=tuple(metrics.language_breakdown(raw.languages)),
            contributors=tuple(contributors),
            recent_commits=tuple(metrics.build_commits(raw.commits, self._settings.recent_commits)),
            commit_activity=metrics.weekly_activity(raw.commit_activity, estimator),
            health=health,
            last_fetched=now,
        )


async def _gather_required(**coroutines: Awaitable[Any]) -> dict[str, Any]:
    """Await the named coroutines together; the first failure cancels the rest."""

    tasks = {name: asyncio.ensure_future(coro) for name, coro in coroutines.items()}
    try:
        done, pending = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks.values():
            task.cancel()
        raise

    failures = [task.exception() for task in tasks.values() if task in done and task.exception() is not None]
    if failures:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending)
        exc = failures[0]
        if isinstance(exc, AnalyticsError):
            raise exc
        raise PartialDataError(f"Required data could not be fetched: {exc}") from exc

    return {name: task.result() for name, task in tasks.items()}


def _expect(value: Any, kind: type, name: str) -> Any:
    if not isinstance(value, kind):
        raise PartialDataError(f"Unexpected {name} payload: expected {kind.__name__}")
    return value


__all__ = ["AnalyticsPipeline", "RawRepositoryData", "RepositoryAggregator"]
