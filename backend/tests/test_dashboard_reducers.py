"""
backend/tests/test_dashboard_reducers.py

Pure reducer tests: no store, no clock.
"""

from datetime import timedelta

import pytest

from backend.features.dashboard.reducers import highest_bill, reduce_dashboard, total_sales
from backend.tests.mocks import make_bill


class TestTotalSales:
    def test_empty_is_zero(self):
        assert total_sales([]) == 0

    def test_sums_and_rounds_to_cents(self, fixed_now):
        bills = [make_bill("u1", 0.1, fixed_now), make_bill("u1", 0.2, fixed_now)]

        assert total_sales(bills) == 0.3


class TestHighestBill:
    def test_none_when_empty(self):
        assert highest_bill([]) is None

    def test_none_when_all_zero(self, fixed_now):
        assert highest_bill([make_bill("u1", 0, fixed_now), make_bill("u1", 0, fixed_now)]) is None

    def test_picks_maximum(self, fixed_now):
        bills = [make_bill("u1", amount, fixed_now) for amount in (40, 250, 90)]

        assert highest_bill(bills).total_amount == 250

    def test_tie_goes_to_first_encountered(self, fixed_now):
        first = make_bill("u1", 100, fixed_now, bill_id="first")
        second = make_bill("u1", 100, fixed_now + timedelta(minutes=1), bill_id="second")

        assert highest_bill([first, second]).id == "first"


class TestReduceDashboard:
    def test_empty_user(self):
        agg = reduce_dashboard([], [], [], 0, 0, [])

        assert agg.todays_total_sales == 0
        assert agg.highest_bill_today is None
        assert agg.todays_bills_count == 0
        assert agg.recent_bills == []
        assert agg.this_weeks_total_sales == 0
        assert agg.this_months_total_sales == 0

    def test_recent_trimmed_and_sorted(self, fixed_now):
        bills = [make_bill("u1", 10 + i, fixed_now - timedelta(hours=i)) for i in range(18)]

        agg = reduce_dashboard([], [], [], 0, 18, list(reversed(bills)))

        assert len(agg.recent_bills) == 15
        assert [b.id for b in agg.recent_bills] == [b.id for b in bills[:15]]

    def test_counts_pass_through(self):
        agg = reduce_dashboard([], [], [], total_packages=7, total_bills=42, recent_bills=[])

        assert agg.total_packages == 7
        assert agg.total_bills == 42

    def test_aggregate_is_frozen(self):
        agg = reduce_dashboard([], [], [], 0, 0, [])

        with pytest.raises(Exception):
            agg.total_bills = 5

    def test_deterministic(self, fixed_now):
        today = [make_bill("u1", 30, fixed_now, bill_id="x"), make_bill("u1", 70, fixed_now, bill_id="y")]

        one = reduce_dashboard(today, today, today, 2, 2, today)
        two = reduce_dashboard(today, today, today, 2, 2, today)

        assert one == two
        assert one.todays_total_sales == 100
        assert one.highest_bill_today.id == "y"

    def test_camel_case_serialization(self, fixed_now):
        agg = reduce_dashboard([make_bill("u1", 5, fixed_now)], [], [], 1, 1, [])
        payload = agg.model_dump(mode="json", by_alias=True)

        assert set(payload) == {
            "todaysTotalSales",
            "highestBillToday",
            "totalPackages",
            "totalBills",
            "recentBills",
            "thisWeeksTotalSales",
            "thisMonthsTotalSales",
            "todaysBillsCount",
        }
        assert payload["highestBillToday"]["totalAmount"] == 5
