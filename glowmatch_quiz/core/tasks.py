"""
Background Task Registry: tracked fire-and-forget jobs.
Failures are logged, never raised to the caller; tests can await completion.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, List

from glowmatch_quiz.infrastructure.logger import quiz_logger

logger = logging.getLogger("BackgroundTasks")


class BackgroundTaskRegistry:
    """
    Holds handles of pending background jobs so they can be inspected or awaited.
    Jobs are never cancelled when the user navigates away.
    """

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}
        self.failures: Dict[str, BaseException] = {}
        self.completed: List[str] = []
        self._counter = 0

    def spawn(self, name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Schedule a coroutine on the running loop and track it."""
        self._counter += 1
        key = f"{name}#{self._counter}"
        task = asyncio.get_running_loop().create_task(coro, name=key)
        self._tasks[key] = task
        task.add_done_callback(lambda t, k=key, n=name: self._on_done(k, n, t))
        logger.debug(f"Spawned background job {key}")
        return task

    def _on_done(self, key: str, name: str, task: asyncio.Task):
        self._tasks.pop(key, None)
        if task.cancelled():
            logger.info(f"Background job {key} cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self.failures[key] = exc
            quiz_logger.background_job(name, ok=False, error=str(exc) or type(exc).__name__)
            return
        self.completed.append(key)
        quiz_logger.background_job(name, ok=True)

    @property
    def pending(self) -> List[str]:
        return list(self._tasks.keys())

    async def wait_all(self, timeout: float = None):
        """Wait until every job spawned so far has finished."""
        while self._tasks:
            tasks = list(self._tasks.values())
            done, not_done = await asyncio.wait(tasks, timeout=timeout)
            if not_done:
                logger.warning(f"{len(not_done)} background job(s) still running after {timeout}s")
                return
            # Let done-callbacks run before checking again
            await asyncio.sleep(0)
