"""Periodic task runner with an injectable clock.

Each registered task gets its own loop. A loop fires the task every
``interval`` seconds as measured on the injected clock; the task runs
in the background so a slow invocation never delays the tick cadence.
If a tick comes due while the previous invocation of the same task is
still running, that tick is skipped (single flight per task). Ticks
missed while the loop was asleep are not replayed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]
TaskFunc = Callable[[], Awaitable[object]]


class PeriodicTask:
    """A named async callable with a single-flight guard."""

    def __init__(self, name: str, interval: float, func: TaskFunc, *, run_at_start: bool = True) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0 (task {name!r})")
        self.name = name
        self.interval = interval
        self.run_at_start = run_at_start
        self._func = func
        self._running = False
        self.runs = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self._running

    async def run_once(self) -> bool:
        """Run the task unless it is already running. Returns whether it ran."""
        if self._running:
            self.skipped += 1
            _logger.warning("Task %s still running; skipping this tick", self.name)
            return False
        self._running = True
        try:
            await self._func()
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.exception("Task %s failed", self.name)
        finally:
            self._running = False
            self.runs += 1
        return True


class TaskRunner:
    """Drives a set of :class:`PeriodicTask` loops until stopped."""

    def __init__(self, *, clock: Clock = time.monotonic, sleep: Sleep = asyncio.sleep) -> None:
        self._clock = clock
        self._sleep = sleep
        self._tasks: list[PeriodicTask] = []
        self._inflight: set[asyncio.Task[bool]] = set()
        self._stopped = False

    @property
    def tasks(self) -> list[PeriodicTask]:
        return list(self._tasks)

    def add(self, name: str, interval: float, func: TaskFunc, *, run_at_start: bool = True) -> PeriodicTask:
        task = PeriodicTask(name, interval, func, run_at_start=run_at_start)
        self._tasks.append(task)
        return task

    def stop(self) -> None:
        self._stopped = True

    def _fire(self, task: PeriodicTask) -> None:
        inflight = asyncio.create_task(task.run_once(), name=f"pyseta:{task.name}")
        self._inflight.add(inflight)
        inflight.add_done_callback(self._inflight.discard)

    async def _loop(self, task: PeriodicTask) -> None:
        next_at = self._clock()
        if not task.run_at_start:
            next_at += task.interval
        while not self._stopped:
            delay = next_at - self._clock()
            if delay > 0:
                await self._sleep(delay)
                if self._stopped:
                    break
            self._fire(task)
            next_at += task.interval
            now = self._clock()
            if next_at <= now:
                missed = int((now - next_at) // task.interval) + 1
                _logger.debug("Task %s fell behind by %d tick(s)", task.name, missed)
                next_at += missed * task.interval
            # Let the fired invocation start before computing the next sleep.
            await asyncio.sleep(0)

    async def run(self) -> None:
        """Run every task loop until :meth:`stop` is called or the runner is cancelled."""
        self._stopped = False
        _logger.info("Starting %d periodic task(s)", len(self._tasks))
        try:
            await asyncio.gather(*(self._loop(task) for task in self._tasks))
        except asyncio.CancelledError:
            for inflight in self._inflight:
                inflight.cancel()
            raise
        finally:
            pending = list(self._inflight)
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
