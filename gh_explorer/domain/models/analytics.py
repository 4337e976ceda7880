"""
AnalyticsRecord Domain Model

Write-only telemetry rows appended to the analytics table.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AnalyticsAction(str, Enum):
    RATE_LIMIT_UPDATE = "rate_limit_update"
    RATE_LIMIT_CHECK = "rate_limit_check"
    CACHE_UPDATE = "cache_update"
    CACHE_CLEANUP = "cache_cleanup"


@dataclass
class AnalyticsRecord:
    """Analytics row: epoch-ms timestamp, action, and action-specific fields"""

    timestamp: int
    action: AnalyticsAction
    fields: dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        return {**self.fields, "timestamp": self.timestamp, "action": self.action.value}
