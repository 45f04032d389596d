from __future__ import annotations

import asyncio

from repo_analytics.poller import Poller


def test_poller_ticks_until_stopped():
    ticks: list[str] = []

    async def scenario() -> None:
        done = asyncio.Event()

        async def tick(target: str) -> None:
            ticks.append(target)
            if len(ticks) == 3:
                done.set()

        poller = Poller(tick, interval=0.01)
        poller.start("acme/demo")
        assert poller.running is True
        assert poller.target == "acme/demo"
        await asyncio.wait_for(done.wait(), timeout=2)
        await poller.aclose()
        assert poller.running is False
        assert poller.target is None

    asyncio.run(scenario())
    assert ticks == ["acme/demo"] * 3


def test_restart_replaces_previous_timer():
    ticks: list[str] = []

    async def scenario() -> None:
        done = asyncio.Event()

        async def tick(target: str) -> None:
            ticks.append(target)
            if len(ticks) >= 2:
                done.set()

        poller = Poller(tick, interval=0.01)
        poller.start("old/repo")
        poller.start("new/repo")
        await asyncio.wait_for(done.wait(), timeout=2)
        await poller.aclose()

    asyncio.run(scenario())
    assert set(ticks) == {"new/repo"}


def test_failing_tick_keeps_timer_running(caplog):
    attempts = 0

    async def scenario() -> None:
        done = asyncio.Event()

        async def tick(_: str) -> None:
            nonlocal attempts
            attempts += 1
            if attempts >= 3:
                done.set()
            raise RuntimeError("upstream unavailable")

        poller = Poller(tick, interval=0.01)
        poller.start("acme/demo")
        await asyncio.wait_for(done.wait(), timeout=2)
        assert poller.running is True
        await poller.aclose()

    with caplog.at_level("ERROR"):
        asyncio.run(scenario())

    assert attempts >= 3
    assert "Real-time update of acme/demo failed" in caplog.text


def test_stop_without_start_is_a_no_op():
    async def scenario() -> None:
        async def tick(_: str) -> None:
            raise AssertionError("never called")

        poller = Poller(tick, interval=60)
        poller.stop()
        await poller.aclose()
        assert poller.running is False

    asyncio.run(scenario())
