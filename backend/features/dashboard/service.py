"""
backend/features/dashboard/service.py
Dashboard rollups: window the user's bills, read lifetime counts, reduce.
"""

from datetime import datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from backend.core.logging import log_event
from backend.features.bills.policy import EDITABLE_BILLS_LIMIT
from backend.features.dashboard.reducers import reduce_dashboard
from backend.features.dashboard.windows import compute_windows
from backend.features.store.record_store import RecordStore, get_store
from backend.models.dashboard import DashboardAggregate


def compute_dashboard(
    user_id: str,
    now: Optional[datetime] = None,
    *,
    store: Optional[RecordStore] = None,
    tz: Union[str, ZoneInfo, None] = None,
) -> DashboardAggregate:
    """
    Compute the dashboard aggregate for one user.

    Read-only and stateless. The window queries have no ordering dependency on
    each other; any store error (StoreUnavailableError) propagates and no
    partial aggregate is returned.

    Args:
        user_id: Authenticated owner id
        now: Reference instant (defaults to wall-clock)
        store: Record store (defaults to the process store)
        tz: Business timezone override

    Returns:
        DashboardAggregate
    """
    records = store or get_store()
    windows = compute_windows(now, tz)

    todays = records.find_bills_created_between(user_id, windows.today_start, windows.today_end)
    weeks = records.find_bills_created_between(user_id, windows.week_start)
    months = records.find_bills_created_between(user_id, windows.month_start)
    total_packages = records.count_packages(user_id)
    total_bills = records.count_bills(user_id)
    recent = records.find_most_recent_bills(user_id, EDITABLE_BILLS_LIMIT)

    aggregate = reduce_dashboard(
        todays_bills=todays,
        weeks_bills=weeks,
        months_bills=months,
        total_packages=total_packages,
        total_bills=total_bills,
        recent_bills=recent,
    )

    log_event(
        "info",
        "dashboard.computed",
        user_id=user_id,
        event_type="dashboard",
        extra={
            "todays_bills_count": aggregate.todays_bills_count,
            "total_bills": aggregate.total_bills,
            "window_today_start": windows.today_start.isoformat(),
        },
    )
    return aggregate
