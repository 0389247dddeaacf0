"""
backend/api/dashboard.py

Dashboard analytics endpoint.
Windows → record store reads → reducers → flat aggregate.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.core.auth import get_current_user_id
from backend.core.errors import ValidationError
from backend.features.dashboard.service import compute_dashboard
from backend.models.dashboard import DashboardAggregate

router = APIRouter()


def _parse_now(now: Optional[str]) -> Optional[datetime]:
    if not now:
        return None
    try:
        return datetime.fromisoformat(now.replace('Z', '+00:00'))
    except ValueError as e:
        raise ValidationError("Invalid ISO timestamp format for 'now' parameter") from e


@router.get("/analytics", response_model=DashboardAggregate)
def get_dashboard_analytics(
    now: Optional[str] = Query(None, description="ISO timestamp for deterministic results (testing only)"),
    user_id: str = Depends(get_current_user_id),
) -> DashboardAggregate:
    """
    Dashboard rollups for the caller.

    Returns:
    - todaysTotalSales, todaysBillsCount, highestBillToday (null when no sale today)
    - thisWeeksTotalSales (week starts Sunday), thisMonthsTotalSales
    - totalPackages, totalBills (lifetime)
    - recentBills: the 15 most recent bills, newest first

    Deterministic: same records + same now => identical output.
    """
    return compute_dashboard(user_id, now=_parse_now(now))
