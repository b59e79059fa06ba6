"""In-process deferred jobs keyed by name."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]


@dataclass
class DeferredJobScheduler:
    """Hold one asyncio timer per key, independent of any request.

    Timers live only as long as the process; callers persist due times
    themselves and re-register pending jobs on start-up. Only a timer that is
    still waiting can be cancelled: once its job has started it runs to
    completion, and ``close`` waits for it.
    """

    _timers: dict[str, asyncio.Task[None]] = field(default_factory=dict)
    _started: set[asyncio.Task[None]] = field(default_factory=set)
    _closing: bool = False

    def schedule_once(self, key: str, due_at: datetime, job: Job) -> None:
        """Run ``job`` once at ``due_at``, replacing a waiting timer under ``key``."""
        self.cancel(key)
        delay = max(0.0, (due_at - datetime.now(tz=UTC)).total_seconds())
        self._start(key, self._run_once(key, delay, job))

    def schedule_every(self, key: str, interval_seconds: float, job: Job) -> None:
        """Run ``job`` repeatedly, waiting ``interval_seconds`` between runs."""
        self.cancel(key)
        self._start(key, self._run_every(key, interval_seconds, job))

    def cancel(self, key: str) -> bool:
        """Cancel a waiting timer under ``key``; return true if one was stopped.

        A job that has already started is left running and false is returned.
        """
        task = self._timers.get(key)
        if task is None or task.done() or task in self._started:
            return False
        self._timers.pop(key, None)
        task.cancel()
        return True

    def is_scheduled(self, key: str) -> bool:
        """Return true when a timer is pending or running under ``key``."""
        task = self._timers.get(key)
        return task is not None and not task.done()

    async def wait(self, key: str) -> None:
        """Wait for a started job under ``key`` to finish."""
        task = self._timers.get(key)
        if task is not None and task in self._started:
            await asyncio.wait({task})

    async def close(self) -> None:
        """Cancel waiting timers and wait for started jobs to finish."""
        self._closing = True
        tasks = list(self._timers.values())
        running = set(self._started)
        self._timers.clear()
        for task in tasks:
            if task not in running:
                task.cancel()
        await asyncio.gather(*tasks, *running, return_exceptions=True)

    def _start(self, key: str, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._timers[key] = task
        task.add_done_callback(lambda done: self._forget(key, done))

    def _forget(self, key: str, task: asyncio.Task[None]) -> None:
        self._started.discard(task)
        if self._timers.get(key) is task:
            self._timers.pop(key, None)

    async def _run_once(self, key: str, delay: float, job: Job) -> None:
        await asyncio.sleep(delay)
        await self._run_started(key, job)

    async def _run_every(self, key: str, interval_seconds: float, job: Job) -> None:
        while not self._closing:
            await self._run_started(key, job)
            if self._closing:
                return
            await asyncio.sleep(interval_seconds)

    async def _run_started(self, key: str, job: Job) -> None:
        task = asyncio.current_task()
        self._started.add(task)  # type: ignore[arg-type]
        try:
            await _run_job(key, job)
        finally:
            self._started.discard(task)  # type: ignore[arg-type]


async def _run_job(key: str, job: Job) -> None:
    try:
        await job()
    except Exception:
        logger.exception("Scheduled job failed", extra={"job": key})
