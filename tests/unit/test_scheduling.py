"""Tests for PeriodicTask."""

from __future__ import annotations

import asyncio

from liquidity_desk.scheduling import PeriodicTask


async def test_tick_runs_body() -> None:
    calls: list[int] = []

    async def body() -> None:
        calls.append(1)

    task = PeriodicTask("body", body, 10.0)

    assert await task.tick()
    assert calls == [1]
    assert task.runs == 1


async def test_overlapping_tick_is_skipped() -> None:
    release = asyncio.Event()
    started = asyncio.Event()

    async def slow() -> None:
        started.set()
        await release.wait()

    task = PeriodicTask("slow", slow, 10.0)
    first = asyncio.create_task(task.tick())
    await started.wait()

    assert task.running
    assert await task.tick() is False
    assert task.skipped == 1

    release.set()
    assert await first is True
    assert not task.running
    assert task.runs == 1


async def test_failures_are_counted_and_contained() -> None:
    async def broken() -> None:
        raise RuntimeError("boom")

    task = PeriodicTask("broken", broken, 10.0)

    assert await task.tick()
    assert await task.tick()
    assert task.failures == 2
    assert not task.running


async def test_loop_fires_repeatedly_until_stopped() -> None:
    calls: list[int] = []

    async def body() -> None:
        calls.append(1)

    task = PeriodicTask("fast", body, 0.01)
    task.start()
    assert task.started
    await asyncio.sleep(0.1)
    await task.stop()

    assert not task.started
    assert len(calls) >= 2
    count = len(calls)
    await asyncio.sleep(0.05)
    assert len(calls) == count


async def test_delayed_start() -> None:
    calls: list[int] = []

    async def body() -> None:
        calls.append(1)

    task = PeriodicTask("delayed", body, 10.0, run_immediately=False)
    task.start()
    await asyncio.sleep(0.02)
    await task.stop()

    assert calls == []


async def test_interval_can_change_while_running() -> None:
    current = {"interval": 300.0}

    async def body() -> None:
        return None

    task = PeriodicTask("dynamic", body, lambda: current["interval"])
    assert task.interval == 300.0
    current["interval"] = 150.0
    assert task.interval == 150.0


async def test_stop_cancels_invocation_in_flight() -> None:
    events: list[str] = []

    async def slow() -> None:
        events.append("started")
        await asyncio.sleep(0.2)
        events.append("finished")

    task = PeriodicTask("slow", slow, 0.03)
    task.start()
    await asyncio.sleep(0.08)
    assert task.skipped >= 1
    assert task.running

    await task.stop()
    await asyncio.sleep(0.3)

    assert events == ["started"]
    assert not task.running
