"""
Analytics Service - best-effort telemetry sink

Appends AnalyticsRecord rows to the analytics table. Records are never
read back by the fetch layer, so storage failures are logged and dropped.
"""

import time
from collections.abc import Callable
from typing import Any

from ..core.exceptions import StorageError
from ..core.logging_config import get_logger
from ..domain.models import AnalyticsAction, AnalyticsRecord
from ..domain.repositories import ANALYTICS_TABLE, PersistentStore

logger = get_logger(__name__)


class AnalyticsService:
    """Writes analytics records without ever failing the caller"""

    def __init__(self, store: PersistentStore, clock: Callable[[], float] = time.time):
        self.store = store
        self._clock = clock

    async def record(self, action: AnalyticsAction, **fields: Any) -> bool:
        """
        Append a record for action

        Returns:
            True if the record was stored, False if the write failed
        """
        record = AnalyticsRecord(
            timestamp=int(self._clock() * 1000), action=action, fields=fields
        )
        try:
            await self.store.put(ANALYTICS_TABLE, record.to_record())
            return True
        except StorageError as e:
            logger.warning(f"Failed to save {action.value} analytics: {e.message}")
            return False
