"""
Status Service - user-visible state of the explorer

Holds what the browser UI used to render: loading indicator, a transient
warning, a persistent error, whether fetch/refresh are available, and the
repository currently on display. Renderers (API, CLI) only read it.
"""

import asyncio
from typing import Any

from ..core.logging_config import get_logger
from ..core.scheduler import TaskScheduler
from ..domain.models import Repository

logger = get_logger(__name__)

DEFAULT_LOADING_MESSAGE = "Loading..."


class StatusBoard:
    """
    User-visible state.

    Warnings auto-dismiss after warning_duration_ms; errors stay until
    hide_error() is called by a new action or by the rate-limit re-enable.
    """

    def __init__(self, scheduler: TaskScheduler, warning_duration_ms: int = 5000):
        self._scheduler = scheduler
        self.warning_duration_ms = warning_duration_ms
        self._warning_timer: asyncio.TimerHandle | None = None

        self.loading = False
        self.loading_message: str | None = None
        self.warning: str | None = None
        self.error: str | None = None
        self.rate_limited = False
        self.online = True
        self.current_repository: Repository | None = None
        self.repository_visible = False

    @property
    def fetch_allowed(self) -> bool:
        """Fetch/refresh are available (online and not rate-limited)"""
        return self.online and not self.rate_limited

    @property
    def controls_enabled(self) -> bool:
        return self.fetch_allowed and not self.loading

    def set_loading(self, is_loading: bool, message: str = DEFAULT_LOADING_MESSAGE) -> None:
        self.loading = is_loading
        self.loading_message = message if is_loading else None

    def show_warning(self, message: str) -> None:
        logger.warning(message)
        self.warning = message
        self._scheduler.cancel(self._warning_timer)
        self._warning_timer = self._scheduler.call_later(
            self.warning_duration_ms / 1000, self.hide_warning
        )

    def hide_warning(self) -> None:
        self.warning = None
        self._warning_timer = None

    def show_error(self, message: str) -> None:
        logger.error(message)
        self.error = message

    def hide_error(self) -> None:
        self.error = None

    def disable_fetch(self) -> None:
        self.rate_limited = True

    def enable_fetch(self) -> None:
        self.rate_limited = False

    def set_online(self, online: bool) -> None:
        self.online = online

    def show_repository(self, repository: Repository) -> None:
        self.current_repository = repository
        self.repository_visible = True

    def hide_repository(self) -> None:
        self.repository_visible = False

    def snapshot(self) -> dict[str, Any]:
        """Serializable view for renderers"""
        return {
            "loading": self.loading,
            "loading_message": self.loading_message,
            "warning": self.warning,
            "error": self.error,
            "fetch_enabled": self.fetch_allowed,
            "controls_enabled": self.controls_enabled,
            "online": self.online,
            "rate_limited": self.rate_limited,
            "repository": (
                self.current_repository.to_dict()
                if self.current_repository and self.repository_visible
                else None
            ),
        }
