"""
Retry Executor - timeout and exponential backoff around one remote call

Each attempt is bounded by timeout_ms; a timeout cancels the attempt and
raises RequestTimedOut without retrying. Other retryable failures are
retried up to max_retries times, sleeping base_delay_ms * 2**attempt
between attempts. The last failure is re-raised when retries run out.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..core.exceptions import RequestTimedOut, is_retryable
from ..core.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Runs an attempt factory with per-attempt timeout and backoff"""

    def __init__(
        self,
        max_retries: int,
        base_delay_ms: int,
        timeout_ms: int,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.timeout_ms = timeout_ms
        self._sleep = sleep

    def backoff_delay(self, attempt_index: int) -> int:
        """Delay in ms after the failed attempt with this index (0-based)"""
        return self.base_delay_ms * (1 << attempt_index)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run operation until it succeeds or retries are exhausted

        Args:
            operation: Zero-argument callable performing one attempt

        Returns:
            The first successful attempt's result

        Raises:
            RequestTimedOut: If an attempt exceeds timeout_ms
            Exception: The last failure once retries are exhausted, or any
                non-retryable failure immediately
        """
        attempt = 0
        while True:
            try:
                return await asyncio.wait_for(operation(), timeout=self.timeout_ms / 1000)
            except asyncio.TimeoutError as e:
                raise RequestTimedOut(
                    details={"attempt": attempt + 1, "timeout_ms": self.timeout_ms}
                ) from e
            except Exception as e:
                if not is_retryable(e) or attempt >= self.max_retries:
                    raise

                delay_ms = self.backoff_delay(attempt)
                log_with_context(
                    logger,
                    "warning",
                    f"Attempt {attempt + 1} failed, retrying in {delay_ms}ms: {e}",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    delay_ms=delay_ms,
                )
                await self._sleep(delay_ms / 1000)
                attempt += 1
