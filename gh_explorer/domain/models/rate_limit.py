"""
RateLimitState Value Object

Remote quota snapshot: limit, remaining, reset (epoch seconds).
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

LIMIT_HEADER = "x-ratelimit-limit"
REMAINING_HEADER = "x-ratelimit-remaining"
RESET_HEADER = "x-ratelimit-reset"


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class RateLimitState:
    """
    Immutable quota snapshot.

    Before the first observation the state is unbounded
    (limit = remaining = +inf, reset = 0).
    """

    limit: float
    remaining: float
    reset: int

    @classmethod
    def unbounded(cls) -> "RateLimitState":
        return cls(limit=math.inf, remaining=math.inf, reset=0)

    @classmethod
    def from_headers(cls, headers: Mapping[str, Any]) -> "RateLimitState | None":
        """
        Parse x-ratelimit-* headers.

        Args:
            headers: Response headers (any key case)

        Returns:
            RateLimitState, or None if any of the three values is absent or not an integer
        """
        lowered = {str(key).lower(): value for key, value in headers.items()}
        limit = _parse_int(lowered.get(LIMIT_HEADER))
        remaining = _parse_int(lowered.get(REMAINING_HEADER))
        reset = _parse_int(lowered.get(RESET_HEADER))
        if limit is None or remaining is None or reset is None:
            return None
        return cls(limit=limit, remaining=remaining, reset=reset)

    @classmethod
    def from_mapping(cls, rate: Mapping[str, Any]) -> "RateLimitState | None":
        """Parse the `rate` object of the quota endpoint"""
        limit = _parse_int(rate.get("limit"))
        remaining = _parse_int(rate.get("remaining"))
        reset = _parse_int(rate.get("reset"))
        if limit is None or remaining is None or reset is None:
            return None
        return cls(limit=limit, remaining=remaining, reset=reset)

    @property
    def is_bounded(self) -> bool:
        return not math.isinf(self.remaining)

    @property
    def is_exhausted(self) -> bool:
        return self.remaining == 0

    def is_low(self, threshold: int) -> bool:
        return self.remaining < threshold

    def seconds_until_reset(self, now: float) -> float:
        return max(0.0, self.reset - now)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation (unbounded values become None)"""
        return {
            "limit": None if math.isinf(self.limit) else int(self.limit),
            "remaining": None if math.isinf(self.remaining) else int(self.remaining),
            "reset": self.reset,
        }
