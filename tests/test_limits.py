# =============================================================================
# tests/test_limits.py - Plan Limit Arithmetic Tests
# =============================================================================

import pytest

from core.limits import (
    UNLIMITED,
    can_create,
    format_limit,
    format_usage,
    usage_level,
    usage_percentage,
)


class TestCanCreate:

    def test_at_limit(self):
        assert can_create(3, 3) is False

    def test_below_limit(self):
        assert can_create(3, 2) is True

    def test_unlimited(self):
        assert can_create(UNLIMITED, 10_000) is True

    def test_zero_limit(self):
        assert can_create(0, 0) is False


class TestUsage:

    @pytest.mark.parametrize("current,limit,expected", [
        (1, 4, 25.0),
        (10, 4, 100.0),
        (5, -1, 0.0),
        (0, 0, 100.0),
    ])
    def test_percentage(self, current, limit, expected):
        assert usage_percentage(current, limit) == expected

    def test_format(self):
        assert format_limit(-1) == "Unlimited"
        assert format_limit(10000) == "10,000"
        assert format_usage(1500, -1) == "1,500 / Unlimited"
        assert format_usage(2, 3) == "2 / 3"

    @pytest.mark.parametrize("percentage,level", [
        (0, "ok"),
        (69.9, "ok"),
        (70, "warning"),
        (90, "critical"),
        (100, "critical"),
    ])
    def test_level(self, percentage, level):
        assert usage_level(percentage) == level
