"""Fire-and-forget task runner with its own logging boundary."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class BackgroundTaskRunner:
    """Run coroutines detached from the caller and log their failures."""

    _tasks: set[asyncio.Task[None]] = field(default_factory=set)

    def spawn(self, coro: Coroutine[object, object, object], description: str) -> None:
        """Schedule ``coro`` on the running loop without awaiting it."""
        task = asyncio.create_task(_guarded(coro, description), name=description)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        """Number of tasks that have not finished yet."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every spawned task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def close(self) -> None:
        """Cancel outstanding work."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def _guarded(coro: Coroutine[object, object, object], description: str) -> None:
    try:
        await coro
    except Exception:
        logger.exception("Background task failed", extra={"task": description})
