# =============================================================================
# core/ordering.py - Order Index Maintenance
# =============================================================================
# Tables (per base) and fields (per table) carry an order_index that must
# stay a dense sequence 0..n-1. The helpers here are pure: they take the
# sibling rows as read from the database and return the index changes the
# service has to write back.
# =============================================================================

from typing import Any, Iterable, Mapping

Row = Mapping[str, Any]


def next_order_index(existing: Iterable[int]) -> int:
    """
    Index for a new sibling: max + 1, or 0 when there are none.

    `existing` must come from the database at insert time.
    """
    indexes = list(existing)
    return max(indexes) + 1 if indexes else 0


def _sort_key(row: Row) -> tuple:
    return (row.get("order_index", 0), str(row.get("created_at") or ""), str(row["id"]))


def sort_rows(rows: Iterable[Row]) -> list[Row]:
    """Current display order; ties broken by created_at, then id."""
    return sorted(rows, key=_sort_key)


def _changes(ordered: list[Row]) -> dict[str, int]:
    return {
        str(row["id"]): position
        for position, row in enumerate(ordered)
        if row.get("order_index") != position
    }


def compact(rows: Iterable[Row]) -> dict[str, int]:
    """
    Reassign indexes 0..n-1 in current order.

    Returns:
        {row_id: new_index} for rows whose index changes only
    """
    return _changes(sort_rows(rows))


def move(rows: Iterable[Row], row_id: str, position: int) -> dict[str, int]:
    """
    Move one row to `position` (clamped to 0..n-1) and compact the rest.

    Returns:
        {row_id: new_index} for rows whose index changes

    Raises:
        KeyError: If row_id isn't among the rows
    """
    ordered = sort_rows(rows)
    row_id = str(row_id)
    current = next((i for i, row in enumerate(ordered) if str(row["id"]) == row_id), None)
    if current is None:
        raise KeyError(row_id)

    moving = ordered.pop(current)
    position = max(0, min(position, len(ordered)))
    ordered.insert(position, moving)
    return _changes(ordered)


def is_dense(indexes: Iterable[int]) -> bool:
    """True iff the indexes are exactly {0..n-1} with no duplicates."""
    indexes = list(indexes)
    return sorted(indexes) == list(range(len(indexes)))
