"""
Rate Limit Service - tracks the remote API quota

State comes from x-ratelimit-* response headers or from an explicit call
to the quota endpoint. Low quota raises a transient warning; exhausted
quota disables fetching until the reset time, then re-enables it and
clears the error.
"""

import asyncio
import math
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Protocol

from ..core.exceptions import HttpError, InvalidResponseData
from ..core.logging_config import get_logger, log_with_context
from ..core.scheduler import TaskScheduler
from ..domain.models import AnalyticsAction, RateLimitState
from ..remote.github_client import ApiResponse
from .analytics_service import AnalyticsService
from .request_dedup import RequestDeduplicator
from .status_service import StatusBoard

logger = get_logger(__name__)

RATE_LIMIT_CHECK_KEY = "rate_limit_check"


class QuotaClient(Protocol):
    async def fetch_rate_limit(self) -> ApiResponse: ...


def format_reset_time(reset: int) -> str:
    """Local wall-clock time of a reset timestamp"""
    return datetime.fromtimestamp(reset).strftime("%H:%M:%S")


class RateLimitService:
    """Owner of the process-wide RateLimitState"""

    def __init__(
        self,
        client: QuotaClient,
        status: StatusBoard,
        analytics: AnalyticsService,
        scheduler: TaskScheduler,
        warning_threshold: int = 10,
        check_threshold_ms: int = 60000,
        check_timeout_ms: int = 5000,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._status = status
        self._analytics = analytics
        self._scheduler = scheduler
        self.warning_threshold = warning_threshold
        self.check_threshold_ms = check_threshold_ms
        self.check_timeout_ms = check_timeout_ms
        self._clock = clock

        self._state = RateLimitState.unbounded()
        self._last_check_ms = 0
        self._check_flight = RequestDeduplicator(name="rate_limit")
        self._reenable_timer: asyncio.TimerHandle | None = None

    @property
    def state(self) -> RateLimitState:
        return self._state

    @property
    def is_exhausted(self) -> bool:
        return self._state.is_exhausted

    @property
    def last_check_ms(self) -> int:
        return self._last_check_ms

    def update_from_response_headers(self, headers: Mapping[str, Any]) -> bool:
        """
        Update quota state from response headers

        Args:
            headers: Response headers carrying x-ratelimit-limit/remaining/reset

        Returns:
            True if state was updated, False if any header was absent or invalid
        """
        state = RateLimitState.from_headers(headers)
        if state is None:
            return False

        self._apply(state, AnalyticsAction.RATE_LIMIT_UPDATE)
        return True

    async def check_explicitly(self) -> RateLimitState:
        """
        Query the quota endpoint, at most once per check threshold

        Concurrent callers share one in-flight check. Timeouts and failures
        are logged and answered with the last known state.
        """
        if not self._check_flight.is_in_flight(RATE_LIMIT_CHECK_KEY):
            if self._now_ms() - self._last_check_ms < self.check_threshold_ms:
                return self._state

        return await self._check_flight.acquire_or_join(RATE_LIMIT_CHECK_KEY, self._execute_check)

    async def _execute_check(self) -> RateLimitState:
        try:
            response = await asyncio.wait_for(
                self._client.fetch_rate_limit(), timeout=self.check_timeout_ms / 1000
            )
            if not response.ok:
                raise HttpError(response.status)

            rate = response.body.get("rate") if isinstance(response.body, dict) else None
            state = RateLimitState.from_mapping(rate) if isinstance(rate, dict) else None
            if state is None:
                raise InvalidResponseData("Invalid rate limit data received")
        except asyncio.TimeoutError:
            logger.warning("Rate limit check timed out")
            return self._state
        except Exception as e:
            logger.warning(f"Failed to check rate limit: {e}")
            return self._state

        self._last_check_ms = self._now_ms()
        self._apply(state, AnalyticsAction.RATE_LIMIT_CHECK)
        return state

    def _apply(self, state: RateLimitState, action: AnalyticsAction) -> None:
        self._state = state
        self._scheduler.spawn(
            self._analytics.record(action, **state.to_dict()), name=f"analytics-{action.value}"
        )
        log_with_context(
            logger,
            "debug",
            "Rate limit updated",
            limit=state.limit,
            remaining=state.remaining,
            reset=state.reset,
        )

        if state.is_low(self.warning_threshold):
            self._status.show_warning(
                f"Rate limit low: {int(state.remaining)} requests remaining. "
                f"Resets at {format_reset_time(state.reset)}"
            )

        if state.is_exhausted:
            self._handle_exhaustion(state)

    def _handle_exhaustion(self, state: RateLimitState) -> None:
        wait_seconds = state.seconds_until_reset(self._clock())
        minutes = math.ceil(wait_seconds / 60)
        self._status.show_error(
            f"Rate limit exceeded. Wait {minutes} minutes until {format_reset_time(state.reset)}"
        )
        self._status.disable_fetch()

        # A newer exhaustion notice supersedes the pending re-enable
        self._scheduler.cancel(self._reenable_timer)
        self._reenable_timer = self._scheduler.call_later(wait_seconds, self._reenable)

    def _reenable(self) -> None:
        self._reenable_timer = None
        self._status.enable_fetch()
        self._status.hide_error()
        logger.info("Rate limit reset reached, fetching re-enabled")

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def close(self) -> None:
        self._scheduler.cancel(self._reenable_timer)
        self._reenable_timer = None
        self._check_flight.cancel_all()
