"""Background refresh timer."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class Poller(Generic[T]):
    """Runs ``tick(target)`` every ``interval`` seconds in a single task.

    At most one timer exists per poller: :meth:`start` always tears down the
    previous task before creating a new one. Tick failures are logged and do
    not stop the timer.
    """

    def __init__(self, tick: Callable[[T], Awaitable[None]], interval: float = 30.0) -> None:
        self._tick = tick
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._target: T | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def target(self) -> T | None:
        return self._target if self.running else None

    @property
    def interval(self) -> float:
        return self._interval

    def start(self, target: T) -> None:
        self.stop()
        self._target = target
        self._task = asyncio.get_running_loop().create_task(self._run(target))
        LOGGER.info("Polling %s every %.1fs", target, self._interval)

    def stop(self) -> None:
        task, self._task = self._task, None
        self._target = None
        if task is not None and not task.done():
            task.cancel()
            LOGGER.info("Stopped polling")

    async def aclose(self) -> None:
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self, target: T) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._tick(target)
            except asyncio.CancelledError:
                raise
            except Exception:
                LOGGER.exception("Real-time update of %s failed", target)


__all__ = ["Poller"]
