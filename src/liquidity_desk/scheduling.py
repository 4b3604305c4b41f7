"""Fixed-interval asyncio timers that never overlap themselves."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = structlog.get_logger()


class PeriodicTask:
    """
    Run a coroutine function on a fixed interval.

    Ticks fire on a monotonic schedule regardless of how long the previous invocation takes.
    A tick that fires while the previous invocation is still running is skipped, and `stop()`
    cancels the invocation in flight. Exceptions raised by the body are logged and the next
    tick runs normally.

    `interval` may be a callable so the period can change while the task runs.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], Awaitable[object]],
        interval: float | Callable[[], float],
        *,
        run_immediately: bool = True,
    ) -> None:
        self.name = name
        self._func = func
        self._interval = interval
        self._run_immediately = run_immediately
        self._loop_task: asyncio.Task[None] | None = None
        self._current: asyncio.Task[bool] | None = None
        self._busy = False
        self.runs = 0
        self.skipped = 0
        self.failures = 0

    @property
    def interval(self) -> float:
        return self._interval() if callable(self._interval) else self._interval

    @property
    def running(self) -> bool:
        """True while an invocation is in flight."""
        return self._busy

    @property
    def started(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def tick(self) -> bool:
        """Run the body once unless an invocation is already in flight.

        Returns:
            True if the body ran (successfully or not), False if the tick was skipped.
        """
        if self._busy:
            self.skipped += 1
            logger.warning("periodic_task_overlap_skipped", task=self.name)
            return False

        self._busy = True
        try:
            await self._func()
        except Exception:
            self.failures += 1
            logger.exception("periodic_task_failed", task=self.name)
        finally:
            self._busy = False
            self.runs += 1
        return True

    def start(self) -> None:
        if self.started:
            return
        self._loop_task = asyncio.create_task(self._run_loop(), name=f"periodic-{self.name}")
        logger.info("periodic_task_started", task=self.name, interval=self.interval)

    async def stop(self) -> None:
        tasks = [t for t in (self._loop_task, self._current) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._loop_task = None
        self._current = None
        logger.info("periodic_task_stopped", task=self.name, runs=self.runs, skipped=self.skipped)

    def _fire(self) -> None:
        in_flight = self._current is not None and not self._current.done()
        if self._busy or in_flight:
            self.skipped += 1
            logger.warning("periodic_task_overlap_skipped", task=self.name)
            return
        self._current = asyncio.create_task(self.tick(), name=f"tick-{self.name}")

    async def _run_loop(self) -> None:
        next_run = time.monotonic()
        if not self._run_immediately:
            next_run += self.interval
        while True:
            if time.monotonic() >= next_run:
                self._fire()
                next_run += self.interval
                # Fell behind; skip the missed slots
                while next_run <= time.monotonic():
                    next_run += self.interval
            await asyncio.sleep(max(0.0, next_run - time.monotonic()))
