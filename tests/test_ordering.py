# =============================================================================
# tests/test_ordering.py - Order Index Tests
# =============================================================================

import pytest

from core.ordering import compact, is_dense, move, next_order_index, sort_rows


def _rows(*ids_and_indexes):
    return [
        {"id": row_id, "order_index": index, "created_at": f"2024-01-01T00:00:0{n}"}
        for n, (row_id, index) in enumerate(ids_and_indexes)
    ]


class TestNextOrderIndex:

    def test_empty(self):
        assert next_order_index([]) == 0

    def test_after_max(self):
        assert next_order_index([0, 1, 2]) == 3
        assert next_order_index([0, 5]) == 6


class TestCompact:

    def test_closes_gaps(self):
        rows = _rows(("a", 0), ("b", 2), ("c", 3))
        assert compact(rows) == {"b": 1, "c": 2}

    def test_dense_rows_unchanged(self):
        assert compact(_rows(("a", 0), ("b", 1))) == {}

    def test_ties_broken_by_created_at(self):
        rows = _rows(("a", 1), ("b", 1))
        assert [r["id"] for r in sort_rows(rows)] == ["a", "b"]
        assert compact(rows) == {"a": 0}


class TestMove:

    def test_move_to_front(self):
        rows = _rows(("a", 0), ("b", 1), ("c", 2))
        assert move(rows, "c", 0) == {"c": 0, "a": 1, "b": 2}

    def test_position_is_clamped(self):
        rows = _rows(("a", 0), ("b", 1), ("c", 2))
        assert move(rows, "a", 99) == {"b": 0, "c": 1, "a": 2}

    def test_same_position_is_noop(self):
        rows = _rows(("a", 0), ("b", 1))
        assert move(rows, "b", 1) == {}

    def test_unknown_row(self):
        with pytest.raises(KeyError):
            move(_rows(("a", 0)), "zzz", 0)


def test_is_dense():
    assert is_dense([])
    assert is_dense([2, 0, 1])
    assert not is_dense([0, 2])
    assert not is_dense([0, 0, 1])
