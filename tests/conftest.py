from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
import pytest

from repo_analytics.models import (
    ActivityPoint,
    AnalyticsSnapshot,
    HealthMetrics,
    RepositoryIdentifier,
    RepositoryMetadata,
    RepositoryStats,
    WeeklyActivity,
)

WEEK = 604800
FIRST_WEEK = 1700000000


def make_commit(index: int, *, linked: bool = True) -> dict[str, Any]:
    return {
        "sha": f"{index:040x}",
        "html_url": f"https://github.com/facebook/react/commit/{index:040x}",
        "commit": {
            "message": f"Commit number {index}\n\nLonger body",
            "author": {
                "name": f"Author {index}",
                "email": f"author{index}@example.com",
                "date": "2024-01-09T12:00:00Z",
            },
        },
        "author": {"login": f"user{index}", "avatar_url": f"https://avatars.example/{index}"} if linked else None,
    }


class FakeGitHub:
    """In-memory GitHub REST API served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Any] = {}
        self.gates: dict[str, asyncio.Event] = {}

    def add_repository(
        self,
        full_name: str = "facebook/react",
        *,
        languages: dict[str, int] | None = None,
        contributors: list[dict[str, Any]] | None = None,
        stars: int = 5000,
        activity: list[dict[str, Any]] | None = None,
        pull_requests: int = 40,
    ) -> None:
        base = f"/repos/{full_name}"
        self.routes[base] = {
            "description": "A declarative UI library",
            "html_url": f"https://github.com/{full_name}",
            "stargazers_count": stars,
            "forks_count": 100,
            "watchers_count": stars,
            "open_issues_count": 10,
            "size": 1234,
            "created_at": "2013-05-24T16:15:54Z",
            "updated_at": "2024-01-10T00:00:00Z",
            "default_branch": "main",
        }
        self.routes[f"{base}/commits"] = [make_commit(index, linked=index != 1) for index in range(12)]
        self.routes[f"{base}/languages"] = languages if languages is not None else {"JavaScript": 800, "CSS": 200}
        if contributors is None:
            contributors = [
                {"login": "alice", "contributions": 60, "avatar_url": "https://avatars.example/alice"},
                {"login": "bob", "contributions": 30, "avatar_url": "https://avatars.example/bob"},
                {"login": "carol", "contributions": 10, "avatar_url": "https://avatars.example/carol"},
            ]
        self.routes[f"{base}/contributors"] = self._paged(contributors)
        self.routes[f"{base}/stats/commit_activity"] = (
            activity
            if activity is not None
            else [{"week": FIRST_WEEK + index * WEEK, "total": index, "days": [0] * 7} for index in range(10)]
        )
        self.routes["/search/issues"] = self._search({**self._search_counts(), full_name: pull_requests})
        for item in contributors:
            login = item["login"]
            self.routes.setdefault(
                f"/users/{login}",
                {"name": login.title(), "followers": 7, "public_repos": 3, "bio": None, "company": "Acme", "location": ""},
            )

    def fail(self, path: str, status: int, headers: dict[str, str] | None = None) -> None:
        self.routes[path] = lambda request: httpx.Response(status, json={"message": "failure"}, headers=headers)

    def hold(self, path: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[path] = gate
        return gate

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        gate = self.gates.get(path)
        if gate is not None:
            await gate.wait()
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)

    def _search_counts(self) -> dict[str, int]:
        route = self.routes.get("/search/issues")
        return getattr(route, "counts", {})

    @staticmethod
    def _paged(items: list[dict[str, Any]]) -> Callable[[httpx.Request], httpx.Response]:
        def respond(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params.get("page", 1))
            per_page = int(request.url.params.get("per_page", 30))
            start = (page - 1) * per_page
            return httpx.Response(200, json=items[start : start + per_page])

        return respond

    @staticmethod
    def _search(counts: dict[str, int]) -> Callable[[httpx.Request], httpx.Response]:
        def respond(request: httpx.Request) -> httpx.Response:
            query = request.url.params.get("q", "")
            repo = query.split()[0].removeprefix("repo:")
            return httpx.Response(200, json={"total_count": counts.get(repo, 0), "items": []})

        respond.counts = counts  # type: ignore[attr-defined]
        return respond


@pytest.fixture
def fake_github() -> FakeGitHub:
    github = FakeGitHub()
    github.add_repository()
    return github


def build_snapshot(
    *, stars: int = 10, activity: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7), synthetic: bool = False
) -> AnalyticsSnapshot:
    identifier = RepositoryIdentifier("acme", "demo")
    return AnalyticsSnapshot(
        repository=RepositoryMetadata.from_api(identifier, {"stargazers_count": stars}),
        stats=RepositoryStats(
            contributors=1, total_commits=5, lines_of_code=20, stars=stars, forks=0, open_issues=0, pull_requests=0
        ),
        languages=(),
        contributors=(),
        recent_commits=(),
        commit_activity=WeeklyActivity(
            points=tuple(ActivityPoint(label=str(index), commits=count) for index, count in enumerate(activity)),
            synthetic=synthetic,
        ),
        health=HealthMetrics(
            activity=50, community=50, maintenance=50, documentation=50, code_quality=50, growth=50
        ),
    )


@pytest.fixture
def snapshot_factory():
    return build_snapshot
