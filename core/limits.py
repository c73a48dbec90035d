# =============================================================================
# core/limits.py - Plan Limit Arithmetic
# =============================================================================
# A plan limit of -1 means unlimited. Every comparison and every display of
# a limit goes through these helpers so the sentinel is handled in one place.
# =============================================================================

UNLIMITED = -1

# Usage percentage thresholds for display levels
WARNING_PERCENT = 70
CRITICAL_PERCENT = 90


def is_unlimited(limit: int) -> bool:
    return limit == UNLIMITED


def can_create(limit: int, current: int) -> bool:
    """
    Whether one more resource fits under the limit.

    Example:
        can_create(3, 3)   # False
        can_create(-1, 99) # True
    """
    return is_unlimited(limit) or current < limit


def usage_percentage(current: int, limit: int) -> float:
    """Share of the limit in use, capped at 100; 0 for unlimited."""
    if is_unlimited(limit):
        return 0.0
    if limit <= 0:
        # A zero limit is fully used from the start
        return 100.0
    return min(current / limit * 100, 100.0)


def format_limit(limit: int) -> str:
    """'Unlimited' for -1, otherwise the number with thousands separators."""
    return "Unlimited" if is_unlimited(limit) else f"{limit:,}"


def format_usage(current: int, limit: int) -> str:
    return f"{current:,} / {format_limit(limit)}"


def usage_level(percentage: float) -> str:
    """ok / warning / critical, as shown on usage bars."""
    if percentage >= CRITICAL_PERCENT:
        return "critical"
    if percentage >= WARNING_PERCENT:
        return "warning"
    return "ok"
