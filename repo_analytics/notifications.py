"""Transient user-facing notifications."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Notification:
    message: str
    created_at: float
    expires_at: float


class Notifier:
    """Collects error notifications that dismiss themselves after ``ttl`` seconds."""

    def __init__(self, ttl: float = 5.0, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._items: list[Notification] = []
        self._listeners: list[Callable[[Notification], None]] = []

    def notify(self, message: str) -> Notification:
        now = self._clock()
        notification = Notification(message=message, created_at=now, expires_at=now + self._ttl)
        # An identical message still on screen is replaced rather than stacked.
        self._items = [item for item in self._items if item.message != message and item.expires_at > now]
        self._items.append(notification)
        LOGGER.warning("%s", message)
        for listener in list(self._listeners):
            listener(notification)
        return notification

    def active(self) -> list[Notification]:
        """Return the notifications that have not expired yet."""

        now = self._clock()
        self._items = [item for item in self._items if item.expires_at > now]
        return list(self._items)

    def subscribe(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


__all__ = ["Notification", "Notifier"]
