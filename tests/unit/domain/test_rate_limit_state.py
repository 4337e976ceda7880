"""
Unit tests for RateLimitState value object
"""

import math

import pytest

from gh_explorer.domain.models import RateLimitState


class TestRateLimitState:
    """Test RateLimitState parsing and predicates"""

    def test_unbounded_initial_state(self):
        state = RateLimitState.unbounded()

        assert math.isinf(state.limit)
        assert math.isinf(state.remaining)
        assert state.reset == 0
        assert state.is_bounded is False
        assert state.is_exhausted is False
        assert state.is_low(10) is False
        assert state.to_dict() == {"limit": None, "remaining": None, "reset": 0}

    def test_from_headers(self, factories):
        state = RateLimitState.from_headers(factories.rate_headers(remaining=59, limit=60))

        assert state == RateLimitState(limit=60, remaining=59, reset=1_700_003_600)

    def test_from_headers_case_insensitive(self):
        headers = {"X-RateLimit-Limit": "60", "X-RateLimit-Remaining": "1", "X-RateLimit-Reset": "5"}

        assert RateLimitState.from_headers(headers) == RateLimitState(60, 1, 5)

    def test_zero_remaining_is_valid(self, factories):
        """remaining=0 is an observation, not a missing header"""
        state = RateLimitState.from_headers(factories.rate_headers(remaining=0))

        assert state is not None
        assert state.remaining == 0
        assert state.is_exhausted is True

    @pytest.mark.parametrize(
        "missing", ["x-ratelimit-limit", "x-ratelimit-remaining", "x-ratelimit-reset"]
    )
    def test_missing_header(self, factories, missing):
        headers = factories.rate_headers()
        del headers[missing]

        assert RateLimitState.from_headers(headers) is None

    def test_non_integer_header(self, factories):
        headers = factories.rate_headers()
        headers["x-ratelimit-remaining"] = "lots"

        assert RateLimitState.from_headers(headers) is None

    def test_from_mapping(self):
        state = RateLimitState.from_mapping({"limit": 5000, "remaining": 4000, "reset": 99})

        assert state == RateLimitState(5000, 4000, 99)
        assert RateLimitState.from_mapping({"limit": 5000}) is None

    def test_is_low(self):
        assert RateLimitState(60, 9, 0).is_low(10) is True
        assert RateLimitState(60, 10, 0).is_low(10) is False

    def test_seconds_until_reset(self):
        state = RateLimitState(60, 0, 1000)

        assert state.seconds_until_reset(940.0) == 60.0
        assert state.seconds_until_reset(2000.0) == 0.0
