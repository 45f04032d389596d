"""Command line interface for repository analytics."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from datetime import datetime
from typing import Any, Optional

import typer

from .config import AppConfig
from .errors import AnalyticsError
from .models import AnalyticsSnapshot
from .session import AnalyticsSession
from .store import SnapshotStore

app = typer.Typer(add_completion=False)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _config(github_token: Optional[str], **overrides: Any) -> AppConfig:
    if github_token:
        overrides["github_token"] = github_token
    return AppConfig.from_env(overrides={key: value for key, value in overrides.items() if value is not None})


@app.command("analyze")
def analyze(
    repository: str = typer.Argument(..., help="Repository as owner/name"),
    github_token: Optional[str] = typer.Option(None, "--token", envvar="GITHUB_TOKEN", help="GitHub token"),
    as_json: bool = typer.Option(False, "--json", help="Print the snapshot as JSON"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Fetch a single analytics snapshot."""

    configure_logging(log_level)
    config = _config(github_token, polling_enabled=False)

    async def runner() -> None:
        async with AnalyticsSession(config) as session:
            snapshot = await session.analyze(repository)
            if as_json:
                typer.echo(json.dumps(snapshot_to_dict(snapshot), indent=2))
            else:
                typer.echo(render_summary(snapshot))
                typer.echo(f"Remaining rate limit: {await session.rate_limit_remaining()}")

    try:
        asyncio.run(runner())
    except AnalyticsError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc


@app.command("watch")
def watch(
    repository: str = typer.Argument(..., help="Repository as owner/name"),
    github_token: Optional[str] = typer.Option(None, "--token", envvar="GITHUB_TOKEN", help="GitHub token"),
    interval: Optional[float] = typer.Option(None, help="Seconds between refreshes"),
    ticks: int = typer.Option(0, help="Stop after this many refreshes (0 runs until interrupted)"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Fetch a snapshot and keep it fresh with periodic polling."""

    configure_logging(log_level)
    config = _config(github_token, polling_enabled=True, poll_interval=interval)

    async def runner() -> None:
        async with AnalyticsSession(config) as session:
            done = asyncio.Event()
            updates = 0

            def on_change(store: SnapshotStore) -> None:
                nonlocal updates
                if store.loading or store.snapshot is None:
                    return
                typer.echo(render_status_line(store.snapshot))
                updates += 1
                if ticks and updates > ticks:
                    done.set()

            session.store.subscribe(on_change)
            session.subscribe_notifications(lambda item: typer.echo(f"! {item.message}", err=True))
            await session.analyze(repository)
            await done.wait()

    try:
        asyncio.run(runner())
    except AnalyticsError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        typer.echo("Stopped.")


def render_status_line(snapshot: AnalyticsSnapshot) -> str:
    stats = snapshot.stats
    return (
        f"[{snapshot.last_fetched.astimezone().strftime('%H:%M:%S')}] {snapshot.repository.full_name}: "
        f"{stats.stars} stars, {stats.forks} forks, {stats.open_issues} open issues, "
        f"{stats.pull_requests} pull requests, {stats.total_commits} commits"
    )


def render_summary(snapshot: AnalyticsSnapshot) -> str:
    repo = snapshot.repository
    stats = snapshot.stats
    health = snapshot.health
    lines = [
        f"{repo.full_name} - {repo.description}",
        f"  {repo.url}",
        "",
        f"Stars {stats.stars}  Forks {stats.forks}  Open issues {stats.open_issues}  "
        f"Pull requests {stats.pull_requests}",
        f"Contributors {stats.contributors}  Commits {stats.total_commits}  "
        f"Lines of code ~{stats.lines_of_code}",
        "",
        "Languages:",
    ]
    lines.extend(f"  {entry.name:<16} {entry.percentage:5.1f}%" for entry in snapshot.languages)
    lines.append("")
    lines.append("Top contributors:")
    lines.extend(
        f"  {entry.login:<20} {entry.commits:>6} commits ({entry.contribution_percentage}%)"
        for entry in snapshot.contributors
    )
    lines.append("")
    label = "Activity (synthetic):" if snapshot.commit_activity.synthetic else "Activity:"
    lines.append(label)
    lines.extend(f"  {point.label:<12} {point.commits}" for point in snapshot.commit_activity.points)
    lines.append("")
    lines.append("Recent commits:")
    lines.extend(f"  {commit.sha[:7]} {commit.author:<16} {commit.message}" for commit in snapshot.recent_commits)
    lines.append("")
    lines.append(
        "Health: "
        f"activity {health.activity}, community {health.community}, maintenance {health.maintenance}, "
        f"documentation {health.documentation}, code quality {health.code_quality}, growth {health.growth}"
    )
    return "\n".join(lines)


def snapshot_to_dict(snapshot: AnalyticsSnapshot) -> dict[str, Any]:
    return _jsonable(dataclasses.asdict(snapshot))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value


__all__ = ["app", "render_summary", "snapshot_to_dict"]
