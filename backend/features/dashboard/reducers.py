"""
backend/features/dashboard/reducers.py

Pure deterministic reducers for the dashboard.
All reducers: (bills, counts) -> immutable read model. No I/O.
"""

from typing import Iterable, List, Optional, Sequence

from backend.features.bills.policy import editable_bills
from backend.models.bill import Bill
from backend.models.dashboard import DashboardAggregate


def total_sales(bills: Iterable[Bill]) -> float:
    """Sum of total_amount (0 for no bills), rounded to cents."""
    return round(sum(b.total_amount for b in bills), 2)


def highest_bill(bills: Iterable[Bill]) -> Optional[Bill]:
    """
    Bill with the largest total_amount, or None when none is above 0.

    The first bill reaching the maximum wins; callers pass bills in
    (created_at, id) order so the result is stable.
    """
    best: Optional[Bill] = None
    for bill in bills:
        if best is None or bill.total_amount > best.total_amount:
            best = bill
    if best is None or best.total_amount <= 0:
        return None
    return best


def reduce_dashboard(
    todays_bills: Sequence[Bill],
    weeks_bills: Sequence[Bill],
    months_bills: Sequence[Bill],
    total_packages: int,
    total_bills: int,
    recent_bills: Sequence[Bill],
) -> DashboardAggregate:
    """
    Reduce windowed bill sets and lifetime counts to the dashboard aggregate.

    Pure function: same inputs => identical output.

    Args:
        todays_bills: Bills created inside today's window
        weeks_bills: Bills created since the start of the week
        months_bills: Bills created since the start of the month
        total_packages: Lifetime package count
        total_bills: Lifetime bill count
        recent_bills: Candidate recent bills (trimmed to the editable window here)

    Returns:
        DashboardAggregate (immutable)
    """
    recent: List[Bill] = editable_bills(recent_bills)

    return DashboardAggregate(
        todays_total_sales=total_sales(todays_bills),
        highest_bill_today=highest_bill(todays_bills),
        total_packages=total_packages,
        total_bills=total_bills,
        recent_bills=recent,
        this_weeks_total_sales=total_sales(weeks_bills),
        this_months_total_sales=total_sales(months_bills),
        todays_bills_count=len(todays_bills),
    )
