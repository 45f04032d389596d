"""Application configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, PositiveInt


UTC = timezone.utc
DEFAULT_API_URL = "https://api.github.com"


class GitHubSettings(BaseModel):
    """Configuration options for the GitHub REST API."""

    token: str | None = Field(default=None, description="Personal access token used for higher rate limits.")
    api_url: str = Field(default=DEFAULT_API_URL)
    request_timeout: float = Field(default=30.0, ge=1.0, description="Timeout for a single HTTP request in seconds.")
    page_size: PositiveInt = Field(default=100, le=100, description="Number of contributors fetched per page.")
    commit_sample_size: PositiveInt = Field(default=100, le=100, description="Number of recent commits requested.")
    top_contributors: PositiveInt = Field(default=6, description="Number of contributors enriched with profile data.")
    recent_commits: PositiveInt = Field(default=10, description="Number of commits surfaced in a snapshot.")


class PollingSettings(BaseModel):
    """Tunables for the background refresh timer."""

    enabled: bool = Field(default=True, description="Refresh the active repository periodically.")
    interval: float = Field(default=30.0, gt=0, description="Seconds between two refreshes.")


class NotificationSettings(BaseModel):
    """Lifetime of user-facing error notifications."""

    ttl: float = Field(default=5.0, gt=0, description="Seconds before a notification is dismissed.")


class AppConfig(BaseModel):
    """Root configuration container."""

    github: GitHubSettings = Field(default_factory=GitHubSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None, overrides: dict[str, Any] | None = None) -> "AppConfig":
        """Construct a configuration object from environment variables."""

        env = env if env is not None else os.environ
        overrides = overrides or {}

        github = GitHubSettings(
            token=overrides.get("github_token") or env.get("GITHUB_TOKEN") or env.get("GH_TOKEN"),
            api_url=overrides.get("github_api_url") or env.get("GITHUB_API_URL") or DEFAULT_API_URL,
            request_timeout=float(overrides.get("github_request_timeout") or env.get("GITHUB_REQUEST_TIMEOUT", 30.0)),
            page_size=int(overrides.get("github_page_size") or env.get("GITHUB_PAGE_SIZE", 100)),
        )

        enabled = overrides.get("polling_enabled")
        if enabled is None:
            enabled = _parse_bool(env.get("POLLING_ENABLED"), default=True)
        polling = PollingSettings(
            enabled=enabled,
            interval=float(overrides.get("poll_interval") or env.get("POLL_INTERVAL", 30.0)),
        )

        notifications = NotificationSettings(
            ttl=float(overrides.get("notification_ttl") or env.get("NOTIFICATION_TTL", 5.0)),
        )

        return cls(github=github, polling=polling, notifications=notifications)


def _parse_bool(value: str | None, *, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value: {value}")


@dataclass(slots=True)
class RateLimitInfo:
    """Snapshot of GitHub's rate limit state."""

    limit: int | None
    remaining: int
    reset_at: datetime


__all__ = [
    "AppConfig",
    "GitHubSettings",
    "PollingSettings",
    "NotificationSettings",
    "RateLimitInfo",
    "UTC",
]
