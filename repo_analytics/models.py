"""Domain models of an analytics snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .errors import ValidationError


UTC = timezone.utc

IDENTIFIER_HINT = "Please enter a GitHub repository name (e.g., facebook/react)"
IDENTIFIER_FORMAT_HINT = 'Please enter repository in format "owner/repo" (e.g., facebook/react)'


@dataclass(slots=True, frozen=True)
class RepositoryIdentifier:
    owner: str
    name: str

    @classmethod
    def parse(cls, value: str | None) -> "RepositoryIdentifier":
        """Parse ``"owner/name"``; raises :class:`ValidationError` otherwise."""

        text = (value or "").strip()
        if not text:
            raise ValidationError(IDENTIFIER_HINT)
        parts = text.split("/")
        if len(parts) != 2 or not all(part.strip() for part in parts):
            raise ValidationError(IDENTIFIER_FORMAT_HINT)
        return cls(owner=parts[0].strip(), name=parts[1].strip())

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(slots=True, frozen=True)
class RepositoryMetadata:
    """Normalized representation of a GitHub repository."""

    owner: str
    name: str
    full_name: str
    description: str
    url: str
    stars: int
    forks: int
    watchers: int
    open_issues: int
    created_at: datetime | None
    updated_at: datetime | None
    size: int
    default_branch: str

    @classmethod
    def from_api(cls, identifier: RepositoryIdentifier, payload: dict[str, Any]) -> "RepositoryMetadata":
        """Convert a ``GET /repos/{owner}/{name}`` body into metadata."""

        return cls(
            owner=identifier.owner,
            name=identifier.name,
            full_name=identifier.full_name,
            description=payload.get("description") or "No description available",
            url=payload.get("html_url", ""),
            stars=payload.get("stargazers_count", 0),
            forks=payload.get("forks_count", 0),
            watchers=payload.get("watchers_count", 0),
            open_issues=payload.get("open_issues_count", 0),
            created_at=parse_datetime(payload.get("created_at")),
            updated_at=parse_datetime(payload.get("updated_at")),
            size=payload.get("size", 0),
            default_branch=payload.get("default_branch", ""),
        )


@dataclass(slots=True, frozen=True)
class RepositoryStats:
    contributors: int
    total_commits: int
    lines_of_code: int
    stars: int
    forks: int
    open_issues: int
    pull_requests: int


@dataclass(slots=True, frozen=True)
class LanguageEntry:
    name: str
    bytes: int
    percentage: float
    color: str


@dataclass(slots=True, frozen=True)
class ContributorEntry:
    login: str
    name: str
    avatar_url: str
    commits: int
    contribution_percentage: int
    estimated_additions: int
    estimated_deletions: int
    followers: int = 0
    public_repos: int = 0
    bio: str = ""
    company: str = ""
    location: str = ""


@dataclass(slots=True, frozen=True)
class CommitEntry:
    sha: str
    message: str
    author: str
    author_name: str
    avatar_url: str
    date: datetime | None
    url: str

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "CommitEntry":
        """Convert one item of ``GET /repos/{owner}/{name}/commits``."""

        commit = payload.get("commit") or {}
        git_author = commit.get("author") or {}
        account = payload.get("author")
        author_name = git_author.get("name", "")
        if account:
            author = account.get("login", author_name)
            avatar = account.get("avatar_url", "")
        else:
            author = author_name
            avatar = f"https://github.com/identicons/{git_author.get('email', '')}.png"
        return cls(
            sha=payload.get("sha", ""),
            message=(commit.get("message") or "").split("\n", 1)[0],
            author=author,
            author_name=author_name,
            avatar_url=avatar,
            date=parse_datetime(git_author.get("date")),
            url=payload.get("html_url", ""),
        )


@dataclass(slots=True, frozen=True)
class ActivityPoint:
    label: str
    commits: int


@dataclass(slots=True, frozen=True)
class WeeklyActivity:
    """Seven activity points; ``synthetic`` marks a placeholder series."""

    points: tuple[ActivityPoint, ...] = ()
    synthetic: bool = False


@dataclass(slots=True, frozen=True)
class HealthMetrics:
    activity: int
    community: int
    maintenance: int
    documentation: int
    code_quality: int
    growth: int


@dataclass(slots=True, frozen=True)
class AnalyticsSnapshot:
    repository: RepositoryMetadata
    stats: RepositoryStats
    languages: tuple[LanguageEntry, ...]
    contributors: tuple[ContributorEntry, ...]
    recent_commits: tuple[CommitEntry, ...]
    commit_activity: WeeklyActivity
    health: HealthMetrics
    last_fetched: datetime = field(default_factory=lambda: datetime.now(tz=UTC))


def parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


__all__ = [
    "RepositoryIdentifier",
    "RepositoryMetadata",
    "RepositoryStats",
    "LanguageEntry",
    "ContributorEntry",
    "CommitEntry",
    "ActivityPoint",
    "WeeklyActivity",
    "HealthMetrics",
    "AnalyticsSnapshot",
    "parse_datetime",
]
