"""
Task Scheduler

Owns every timer and background task started by the fetch layer
(warning dismissal, rate-limit re-enable, background prefetch, analytics
writes) so that all of them can be cancelled when the owner shuts down.
"""

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from .logging_config import get_logger

logger = get_logger(__name__)


class TaskScheduler:
    """Tracks cancellable timers and fire-and-forget tasks"""

    def __init__(self):
        self._timers: set[asyncio.TimerHandle] = set()
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    @property
    def pending_timers(self) -> int:
        return sum(1 for timer in self._timers if not timer.cancelled())

    def call_later(self, delay_seconds: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        """Run callback after delay_seconds; returns a handle usable with cancel()"""
        if self._closed:
            raise RuntimeError("Scheduler is closed")

        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle | None = None

        def fire():
            self._timers.discard(handle)
            try:
                callback()
            except Exception:
                logger.exception("Scheduled callback failed")

        handle = loop.call_later(max(0.0, delay_seconds), fire)
        self._timers.add(handle)
        return handle

    def cancel(self, handle: asyncio.TimerHandle | None) -> None:
        if handle is None:
            return
        handle.cancel()
        self._timers.discard(handle)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        """Start a background task that is cancelled on close()"""
        if self._closed:
            coro.close()
            raise RuntimeError("Scheduler is closed")

        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Background task {task.get_name()} failed: {exc!r}")

    async def drain(self) -> None:
        """Wait until every background task spawned so far has finished"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Cancel all pending timers and background tasks"""
        self._closed = True
        for timer in list(self._timers):
            timer.cancel()
        self._timers.clear()
        for task in list(self._tasks):
            task.cancel()
