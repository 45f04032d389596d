"""Holder of the current analytics snapshot."""

from __future__ import annotations

import dataclasses
import enum
import logging
from datetime import datetime
from typing import Callable

from .models import AnalyticsSnapshot

LOGGER = logging.getLogger(__name__)


class AnalyticsState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    POLLING = "polling"


Listener = Callable[["SnapshotStore"], None]


class SnapshotStore:
    """Single piece of mutable state shared by full fetches and poll ticks.

    A snapshot is replaced wholesale by a full fetch and shallow-merged by a
    poll tick. Full fetches are tagged with a generation number so that a
    result landing after a newer request started is discarded.
    """

    def __init__(self) -> None:
        self._snapshot: AnalyticsSnapshot | None = None
        self._loading = False
        self._error: str | None = None
        self._generation = 0
        self._listeners: list[Listener] = []

    @property
    def snapshot(self) -> AnalyticsSnapshot | None:
        return self._snapshot

    @property
    def fetched_at(self) -> datetime | None:
        return self._snapshot.last_fetched if self._snapshot else None

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> AnalyticsState:
        if self._loading:
            return AnalyticsState.LOADING
        if self._snapshot is not None:
            return AnalyticsState.READY
        return AnalyticsState.IDLE

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin_load(self) -> int:
        """Mark a full fetch as in flight and return its generation."""

        self._generation += 1
        self._loading = True
        self._error = None
        self._changed()
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def replace(self, generation: int, snapshot: AnalyticsSnapshot) -> bool:
        if not self.is_current(generation):
            LOGGER.info(
                "Discarding stale snapshot of %s (generation %s, current %s)",
                snapshot.repository.full_name,
                generation,
                self._generation,
            )
            return False
        self._snapshot = snapshot
        self._loading = False
        self._error = None
        self._changed()
        return True

    def fail(self, generation: int, message: str) -> bool:
        if not self.is_current(generation):
            LOGGER.info("Ignoring failure of stale generation %s: %s", generation, message)
            return False
        self._snapshot = None
        self._loading = False
        self._error = message
        self._changed()
        return True

    def merge(self, update: AnalyticsSnapshot) -> AnalyticsSnapshot:
        """Shallow-merge ``update`` into the current snapshot, new fields winning.

        A synthetic weekly activity series never replaces a measured one.
        """

        current = self._snapshot
        if current is None:
            merged = update
        else:
            changes = {
                item.name: getattr(update, item.name)
                for item in dataclasses.fields(update)
            }
            if update.commit_activity.synthetic and not current.commit_activity.synthetic:
                del changes["commit_activity"]
            merged = dataclasses.replace(current, **changes)
        self._snapshot = merged
        self._changed()
        return merged

    def reset(self) -> None:
        """Forget everything and invalidate any fetch still in flight."""

        self._generation += 1
        self._snapshot = None
        self._loading = False
        self._error = None
        self._changed()

    def set_error(self, message: str) -> None:
        self._error = message
        self._changed()

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)


__all__ = ["AnalyticsState", "SnapshotStore"]
