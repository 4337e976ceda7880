"""
CacheEntry Domain Model

One cached search page per language, with its revalidation token.
"""

from dataclasses import dataclass, replace
from typing import Any

from .repository import RepositoryPage


@dataclass
class CacheEntry:
    """
    Cached search page for a language.

    timestamp is epoch milliseconds of the last successful fetch or
    revalidation; etag is the token sent back as If-None-Match.
    """

    language: str
    data: RepositoryPage
    etag: str | None
    timestamp: int

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.timestamp

    def touched(self, timestamp: int) -> "CacheEntry":
        """Copy of this entry revalidated at timestamp"""
        return replace(self, timestamp=timestamp)

    def to_record(self) -> dict[str, Any]:
        """Row stored in the repositories table (keyed by language)"""
        return {
            "language": self.language,
            "data": self.data.to_dict(),
            "etag": self.etag,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "CacheEntry":
        return cls(
            language=record["language"],
            data=RepositoryPage.from_dict(record.get("data") or {}),
            etag=record.get("etag"),
            timestamp=int(record.get("timestamp") or 0),
        )
