"""Derivation of snapshot metrics from raw GitHub payloads.

Several values are heuristics rather than measurements: the GitHub API does
not expose code churn per contributor, documentation presence or code
quality. Those placeholders are produced by a :class:`MetricsEstimator`,
which callers can replace with :class:`FixedEstimator` for reproducible
output.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime
from typing import Any, Iterable, Mapping, Protocol, Sequence

from .models import (
    ActivityPoint,
    CommitEntry,
    ContributorEntry,
    HealthMetrics,
    LanguageEntry,
    UTC,
    WeeklyActivity,
    parse_datetime,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_LANGUAGE_COLOR = "#6e4c13"
LANGUAGE_COLORS: dict[str, str] = {
    "JavaScript": "#f1e05a",
    "TypeScript": "#3178c6",
    "HTML": "#e34c26",
    "CSS": "#563d7c",
    "Python": "#3572A5",
    "Java": "#b07219",
    "Ruby": "#701516",
    "PHP": "#4F5D95",
    "C++": "#f34b7d",
    "C": "#555555",
    "Shell": "#89e051",
    "Go": "#00ADD8",
    "Rust": "#dea584",
    "Kotlin": "#F18E33",
    "Swift": "#ffac45",
    "Vue": "#41b883",
    "React": "#61dafb",
    "Dart": "#00B4AB",
    "Scala": "#c22d40",
    "Perl": "#0298c3",
}

BYTES_PER_LINE = 50
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
ACTIVITY_WEEKS = 7


class MetricsEstimator(Protocol):
    """Source of the placeholder values that have no measured counterpart."""

    def estimate_additions(self, commits: int) -> int: ...

    def estimate_deletions(self, commits: int) -> int: ...

    def documentation_score(self, has_content: bool) -> float: ...

    def code_quality_score(self) -> float: ...

    def fallback_activity(self, days: int) -> list[int]: ...


class RandomEstimator:
    """Randomized placeholders, drawn from half-open ranges."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def _between(self, low: float, high: float) -> float:
        return low + self._rng.random() * (high - low)

    def estimate_additions(self, commits: int) -> int:
        return round_half_up(commits * self._between(80, 120))

    def estimate_deletions(self, commits: int) -> int:
        return round_half_up(commits * self._between(20, 50))

    def documentation_score(self, has_content: bool) -> float:
        return self._between(75, 100) if has_content else self._between(25, 50)

    def code_quality_score(self) -> float:
        return self._between(60, 90)

    def fallback_activity(self, days: int) -> list[int]:
        return [self._rng.randint(1, 10) for _ in range(days)]


class FixedEstimator:
    """Deterministic placeholders for tests and reproducible reports."""

    def __init__(
        self,
        *,
        additions_per_commit: float = 100,
        deletions_per_commit: float = 35,
        documentation: float = 87.5,
        documentation_without_content: float = 37.5,
        code_quality: float = 75,
        daily_commits: int = 5,
    ) -> None:
        self.additions_per_commit = additions_per_commit
        self.deletions_per_commit = deletions_per_commit
        self.documentation = documentation
        self.documentation_without_content = documentation_without_content
        self.code_quality = code_quality
        self.daily_commits = daily_commits

    def estimate_additions(self, commits: int) -> int:
        return round_half_up(commits * self.additions_per_commit)

    def estimate_deletions(self, commits: int) -> int:
        return round_half_up(commits * self.deletions_per_commit)

    def documentation_score(self, has_content: bool) -> float:
        return self.documentation if has_content else self.documentation_without_content

    def code_quality_score(self) -> float:
        return self.code_quality

    def fallback_activity(self, days: int) -> list[int]:
        return [self.daily_commits] * days


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def total_bytes(languages: Mapping[str, int]) -> int:
    return sum(languages.values())


def language_breakdown(languages: Mapping[str, int]) -> list[LanguageEntry]:
    """Percentages per language, highest share first; empty when there are no bytes."""

    total = total_bytes(languages)
    if total <= 0:
        return []
    entries = [
        LanguageEntry(
            name=name,
            bytes=count,
            percentage=round(count / total * 100, 1),
            color=LANGUAGE_COLORS.get(name, DEFAULT_LANGUAGE_COLOR),
        )
        for name, count in languages.items()
    ]
    return sorted(entries, key=lambda entry: entry.percentage, reverse=True)


def estimate_lines_of_code(languages: Mapping[str, int]) -> int:
    # Rough estimate of ~50 bytes per line.
    return round_half_up(total_bytes(languages) / BYTES_PER_LINE)


def total_commits(contributors: Iterable[Mapping[str, Any]]) -> int:
    return sum(int(item.get("contributions", 0)) for item in contributors)


def contribution_percentages(counts: Sequence[int], *, limit: int | None = None) -> list[int]:
    """Share of each count in the total, rounded to the nearest integer.

    All shares are 0 when the total is 0. When the first ``limit`` shares add
    up to more than 100, the excess is taken back from the entries of that
    slice that were rounded up the most.
    """

    total = sum(counts)
    if total <= 0:
        return [0] * len(counts)
    exact = [count * 100 / total for count in counts]
    shares = [round_half_up(value) for value in exact]
    surfaced = range(len(shares) if limit is None else min(limit, len(shares)))
    excess = sum(shares[index] for index in surfaced) - 100
    if excess > 0:
        by_gain = sorted(surfaced, key=lambda index: (shares[index] - exact[index], index), reverse=True)
        for index in by_gain[:excess]:
            shares[index] -= 1
    return shares


def rank_contributors(contributors: Sequence[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Contributors by commit count, highest first; ties keep their API order."""

    return sorted(contributors, key=lambda item: int(item.get("contributions", 0)), reverse=True)


def build_contributors(
    contributors: Sequence[Mapping[str, Any]],
    profiles: Sequence[Mapping[str, Any]],
    percentages: Sequence[int],
    estimator: MetricsEstimator,
) -> list[ContributorEntry]:
    """Merge contributor counts with their (possibly empty) profiles."""

    entries = []
    for index, contributor in enumerate(contributors):
        profile = profiles[index] if index < len(profiles) else {}
        percentage = percentages[index] if index < len(percentages) else 0
        commits = int(contributor.get("contributions", 0))
        login = contributor.get("login", "")
        entries.append(
            ContributorEntry(
                login=login,
                name=profile.get("name") or login,
                avatar_url=contributor.get("avatar_url", ""),
                commits=commits,
                contribution_percentage=percentage,
                estimated_additions=estimator.estimate_additions(commits),
                estimated_deletions=estimator.estimate_deletions(commits),
                followers=profile.get("followers") or 0,
                public_repos=profile.get("public_repos") or 0,
                bio=profile.get("bio") or "",
                company=profile.get("company") or "",
                location=profile.get("location") or "",
            )
        )
    return entries


def build_commits(commits: Sequence[Mapping[str, Any]], limit: int = 10) -> list[CommitEntry]:
    return [CommitEntry.from_api(dict(item)) for item in commits[:limit]]


def weekly_activity(
    commit_activity: Sequence[Mapping[str, Any]] | None,
    estimator: MetricsEstimator,
) -> WeeklyActivity:
    """Last seven weeks of commit activity, or a synthetic per-day series."""

    if commit_activity:
        points = tuple(
            ActivityPoint(
                label=datetime.fromtimestamp(int(week.get("week", 0)), tz=UTC).date().isoformat(),
                commits=int(week.get("total", 0)),
            )
            for week in commit_activity[-ACTIVITY_WEEKS:]
        )
        return WeeklyActivity(points=points, synthetic=False)

    LOGGER.debug("Commit activity unavailable; using a synthetic series")
    counts = estimator.fallback_activity(len(WEEKDAYS))
    points = tuple(ActivityPoint(label=day, commits=count) for day, count in zip(WEEKDAYS, counts))
    return WeeklyActivity(points=points, synthetic=True)


def health_metrics(
    repository: Mapping[str, Any],
    *,
    contributor_count: int,
    open_issues: int,
    pull_requests: int,
    estimator: MetricsEstimator,
    now: datetime | None = None,
) -> HealthMetrics:
    """Six health scores in ``[0, 100]``, recomputed from scratch every fetch."""

    now = now or datetime.now(tz=UTC)
    stars = repository.get("stargazers_count", 0) or 0
    updated_at = parse_datetime(repository.get("updated_at"))
    if updated_at is not None and updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=UTC)
    days_since_update = (now - updated_at).total_seconds() / 86400 if updated_at else 0.0

    activity = clamp(100 - days_since_update * 2)
    community = clamp(contributor_count * 5 + stars / 100)
    maintenance = clamp(100 - open_issues * 2 + pull_requests / 10)
    documentation = clamp(estimator.documentation_score((repository.get("size") or 0) > 0))
    code_quality = clamp(estimator.code_quality_score())
    growth = clamp(min(100, stars / 100 + activity / 2))

    return HealthMetrics(
        activity=round_half_up(activity),
        community=round_half_up(community),
        maintenance=round_half_up(maintenance),
        documentation=round_half_up(documentation),
        code_quality=round_half_up(code_quality),
        growth=round_half_up(growth),
    )


__all__ = [
    "MetricsEstimator",
    "RandomEstimator",
    "FixedEstimator",
    "LANGUAGE_COLORS",
    "DEFAULT_LANGUAGE_COLOR",
    "language_breakdown",
    "estimate_lines_of_code",
    "total_commits",
    "contribution_percentages",
    "rank_contributors",
    "build_contributors",
    "build_commits",
    "weekly_activity",
    "health_metrics",
    "round_half_up",
]
