"""
Request Deduplicator - single-flight per request key

At most one underlying call runs per key. Callers arriving while it is in
flight join it and observe exactly the same result or exception. The entry
is removed as soon as the call settles, so the next request starts fresh.
"""

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

from ..core.logging_config import get_logger

logger = get_logger(__name__)


class RequestDeduplicator:
    """Maps request key -> shared in-flight task"""

    def __init__(self, name: str = "requests"):
        self.name = name
        self._in_flight: dict[Hashable, asyncio.Task] = {}

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def is_in_flight(self, key: Hashable) -> bool:
        return key in self._in_flight

    def acquire_or_join(
        self, key: Hashable, factory: Callable[[], Awaitable[Any]]
    ) -> Awaitable[Any]:
        """
        Start the call for key, or join the one already running

        Args:
            key: Logical request key
            factory: Zero-argument callable returning the awaitable to run

        Returns:
            Awaitable resolving to the shared outcome. Cancelling it only
            detaches that caller; the shared call keeps running for the others.
        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._release(key, done))
            logger.debug(f"[{self.name}] started {key}")
        else:
            logger.debug(f"[{self.name}] joined in-flight {key}")
        return asyncio.shield(task)

    def _release(self, key: Hashable, task: asyncio.Task) -> None:
        # Only drop the entry we created; a newer call for the key may own it now
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            # Mark the exception retrieved even if every joiner detached
            task.exception()

    def cancel_all(self) -> None:
        """Cancel every in-flight call (owner shutdown)"""
        for task in list(self._in_flight.values()):
            task.cancel()
