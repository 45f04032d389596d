"""Outbound interface used by dashboards and the CLI."""

from __future__ import annotations

import logging
from typing import Callable

import httpx

from .aggregator import AnalyticsPipeline, RepositoryAggregator
from .config import AppConfig
from .errors import AnalyticsError, PartialDataError
from .github_client import GitHubRestClient
from .metrics import MetricsEstimator
from .models import AnalyticsSnapshot, RepositoryIdentifier
from .notifications import Notification, Notifier
from .poller import Poller
from .rate_limiter import RateLimiter
from .store import AnalyticsState, SnapshotStore

LOGGER = logging.getLogger(__name__)


class AnalyticsSession:
    """Owns the client, the snapshot store and the poll timer of one user session."""

    def __init__(
        self,
        config: AppConfig,
        http_client: httpx.AsyncClient | None = None,
        *,
        estimator: MetricsEstimator | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._config = config
        self._token = config.github.token
        self._polling_enabled = config.polling.enabled
        self._notifier = notifier or Notifier(ttl=config.notifications.ttl)
        self._rate_limiter = RateLimiter()
        self._client = GitHubRestClient(
            config.github,
            http_client,
            notifier=self._notifier,
            rate_limiter=self._rate_limiter,
        )
        self._pipeline = AnalyticsPipeline(
            RepositoryAggregator(self._client, config.github),
            config.github,
            estimator,
        )
        self.store = SnapshotStore()
        self._poller: Poller[RepositoryIdentifier] = Poller(self._poll_tick, config.polling.interval)
        self._active: RepositoryIdentifier | None = None

    async def __aenter__(self) -> "AnalyticsSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.aclose()

    async def aclose(self) -> None:
        await self._poller.aclose()
        await self._client.close()

    @property
    def snapshot(self) -> AnalyticsSnapshot | None:
        return self.store.snapshot

    @property
    def state(self) -> AnalyticsState:
        state = self.store.state
        if state is AnalyticsState.READY and self._poller.running:
            return AnalyticsState.POLLING
        return state

    @property
    def loading(self) -> bool:
        return self.store.loading

    @property
    def error(self) -> str | None:
        return self.store.error

    @property
    def active_repository(self) -> RepositoryIdentifier | None:
        return self._active

    @property
    def polling_enabled(self) -> bool:
        return self._polling_enabled

    @property
    def notifications(self) -> list[Notification]:
        return self._notifier.active()

    def subscribe_notifications(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        return self._notifier.subscribe(listener)

    async def rate_limit_remaining(self) -> int | None:
        return await self._rate_limiter.remaining()

    async def set_token(self, token: str | None) -> None:
        """Use ``token`` from the next pipeline run on."""

        self._token = token or None
        # The recorded budget belonged to the previous token.
        await self._rate_limiter.reset()

    def configure_polling(self, enabled: bool) -> None:
        self._polling_enabled = enabled
        self._sync_polling()

    async def analyze(self, value: str) -> AnalyticsSnapshot:
        """Run a full fetch for ``value`` and replace the current snapshot."""

        try:
            identifier = RepositoryIdentifier.parse(value)
        except AnalyticsError as exc:
            self._report(exc)
            self.store.set_error(exc.message)
            raise

        if identifier != self._active:
            self._poller.stop()
        self._active = identifier

        generation = self.store.begin_load()
        LOGGER.info("Analyzing %s", identifier)
        try:
            snapshot = await self._pipeline.run(identifier, self._token)
        except AnalyticsError as exc:
            self._fail(generation, exc)
            raise
        except Exception as exc:
            LOGGER.exception("Unexpected failure while analyzing %s", identifier)
            error = PartialDataError(f"Unexpected failure while analyzing {identifier}: {exc}")
            self._fail(generation, error)
            raise error from exc
        except BaseException:
            # Cancelled runs must not leave the store loading.
            self.store.fail(generation, "Analysis interrupted")
            raise

        if self.store.replace(generation, snapshot):
            self._sync_polling()
        return snapshot

    def reset(self) -> None:
        """Discard the current analysis and stop polling."""

        self._poller.stop()
        self._active = None
        self.store.reset()

    def _sync_polling(self) -> None:
        if self._polling_enabled and self._active is not None and self.store.snapshot is not None:
            if self._poller.target != self._active:
                self._poller.start(self._active)
        else:
            self._poller.stop()

    async def _poll_tick(self, identifier: RepositoryIdentifier) -> None:
        if identifier != self._active:
            return
        try:
            snapshot = await self._pipeline.run(identifier, self._token)
        except AnalyticsError as exc:
            LOGGER.warning("Real-time update of %s failed: %s", identifier, exc)
            return
        if identifier != self._active or self.store.snapshot is None:
            LOGGER.debug("Dropping poll result for %s; analysis changed", identifier)
            return
        self.store.merge(snapshot)

    def _fail(self, generation: int, exc: AnalyticsError) -> None:
        if self.store.fail(generation, f"Error fetching repository data: {exc.message}"):
            self._poller.stop()
        self._report(exc)

    def _report(self, exc: AnalyticsError) -> None:
        if not exc.notified:
            self._notifier.notify(exc.message)
            exc.notified = True


__all__ = ["AnalyticsSession"]
