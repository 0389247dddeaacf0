"""
backend/tests/test_editability_policy.py

Bills are editable only while they are among the owner's 15 most recent.
"""

import pytest
from datetime import timedelta

from backend.core.errors import NotEditableError, ConflictError
from backend.features.bills.policy import (
    EDITABLE_BILLS_LIMIT,
    editable_bills,
    ensure_editable,
    is_editable,
    rank_bills,
)
from backend.tests.mocks import make_bill


class TestIsEditable:
    def test_boundary_ranks(self, fixed_now):
        bill = make_bill("u1", 10, fixed_now)

        assert is_editable(bill, 0) is True
        assert is_editable(bill, 14) is True
        assert is_editable(bill, 15) is False
        assert is_editable(bill, 1000) is False

    def test_limit_is_fifteen(self):
        assert EDITABLE_BILLS_LIMIT == 15

    def test_negative_rank_rejected(self, fixed_now):
        with pytest.raises(ValueError):
            is_editable(make_bill("u1", 10, fixed_now), -1)


class TestEnsureEditable:
    def test_passes_inside_window(self, fixed_now):
        ensure_editable(make_bill("u1", 10, fixed_now), 14)

    def test_raises_not_editable_outside_window(self, fixed_now):
        bill = make_bill("u1", 10, fixed_now, bill_id="old-bill")

        with pytest.raises(NotEditableError) as exc:
            ensure_editable(bill, 15)

        assert exc.value.code == "not_editable"
        assert exc.value.status_code == 409
        assert "old-bill" in exc.value.message

    def test_not_editable_is_a_conflict(self):
        assert issubclass(NotEditableError, ConflictError)


class TestRanking:
    def test_newest_first(self, fixed_now):
        bills = [make_bill("u1", 10, fixed_now - timedelta(minutes=i)) for i in range(5)]

        ranked = rank_bills(reversed(bills))

        assert [b.id for _, b in ranked] == [b.id for b in bills]
        assert [r for r, _ in ranked] == [0, 1, 2, 3, 4]

    def test_equal_timestamps_break_ties_by_id(self, fixed_now):
        a = make_bill("u1", 10, fixed_now, bill_id="a")
        b = make_bill("u1", 10, fixed_now, bill_id="b")

        assert [bill.id for _, bill in rank_bills([a, b])] == ["b", "a"]
        assert [bill.id for _, bill in rank_bills([b, a])] == ["b", "a"]

    def test_editable_window_is_fifteen_newest(self, fixed_now):
        bills = [make_bill("u1", 10, fixed_now - timedelta(minutes=i)) for i in range(20)]

        window = editable_bills(bills)

        assert len(window) == 15
        assert [b.id for b in window] == [b.id for b in bills[:15]]

    def test_sixteenth_bill_drops_out(self, fixed_now):
        bills = [make_bill("u1", 10, fixed_now - timedelta(minutes=i)) for i in range(16)]
        ranks = {bill.id: rank for rank, bill in rank_bills(bills)}
        oldest = bills[-1]

        assert ranks[oldest.id] == 15
        assert is_editable(oldest, ranks[oldest.id]) is False

    def test_fewer_than_limit_all_editable(self, fixed_now):
        bills = [make_bill("u1", 10, fixed_now - timedelta(minutes=i)) for i in range(3)]

        assert len(editable_bills(bills)) == 3
