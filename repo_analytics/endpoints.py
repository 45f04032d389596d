"""GitHub REST paths used to assemble a snapshot."""

from __future__ import annotations

REPOSITORY_PATH = "/repos/{full_name}"
COMMITS_PATH = "/repos/{full_name}/commits"
LANGUAGES_PATH = "/repos/{full_name}/languages"
CONTRIBUTORS_PATH = "/repos/{full_name}/contributors"
COMMIT_ACTIVITY_PATH = "/repos/{full_name}/stats/commit_activity"
USER_PATH = "/users/{login}"
SEARCH_ISSUES_PATH = "/search/issues"


def pull_request_query(full_name: str) -> str:
    return f"repo:{full_name} is:pr"


__all__ = [
    "REPOSITORY_PATH",
    "COMMITS_PATH",
    "LANGUAGES_PATH",
    "CONTRIBUTORS_PATH",
    "COMMIT_ACTIVITY_PATH",
    "USER_PATH",
    "SEARCH_ISSUES_PATH",
    "pull_request_query",
]
