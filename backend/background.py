"""BoroughWatch Backend: Fire-and-forget background work

Persistence writes are submitted here instead of being awaited by the request
that produced them. Failures go to the log, never back to the caller.
"""

import asyncio
import logging
from typing import Awaitable

logger = logging.getLogger("boroughwatch.background")


class BackgroundTasks:
    def __init__(self):
        self._pending: set[asyncio.Task] = set()
        self.failures = 0

    def submit(self, work: Awaitable, description: str) -> asyncio.Task:
        """Schedule `work` on the running loop; returns immediately."""
        task = asyncio.ensure_future(work)
        task.set_name(description)
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if task.cancelled():
            logger.info(f"Background task cancelled: {task.get_name()}")
            return
        exc = task.exception()
        if exc is not None:
            self.failures += 1
            logger.warning(f"Background task failed ({task.get_name()}): {exc}")

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self):
        """Wait for everything submitted so far (shutdown, tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
