"""
backend/features/dashboard/windows.py

Calendar windows for dashboard rollups.

All windows are half-open with an inclusive lower bound, computed on the
business calendar (BUSINESS_TIMEZONE):
- today:      [midnight(now), next midnight)
- this week:  [most recent Sunday at midnight, +inf)
- this month: [first of month at midnight, +inf)
"""

from datetime import datetime, date, time, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict

from backend.core.config import settings

# Day-of-week index 0 starts the week; Python counts Monday as 0, so Sunday is 6.
WEEK_START_WEEKDAY = 6


class TimeWindows(BaseModel):
    """Window boundaries, tz-aware in the business timezone."""

    model_config = ConfigDict(frozen=True)

    now: datetime
    today_start: datetime
    today_end: datetime
    week_start: datetime
    month_start: datetime


def resolve_timezone(tz: Union[str, ZoneInfo, None] = None) -> ZoneInfo:
    if isinstance(tz, ZoneInfo):
        return tz
    return ZoneInfo(tz or settings.BUSINESS_TIMEZONE or "UTC")


def _midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def start_of_week(day: date) -> date:
    """Most recent WEEK_START_WEEKDAY on or before day."""
    return day - timedelta(days=(day.weekday() - WEEK_START_WEEKDAY) % 7)


def compute_windows(now: Optional[datetime] = None, tz: Union[str, ZoneInfo, None] = None) -> TimeWindows:
    """
    Compute today / this week / this month boundaries for a reference instant.

    Pure function: same now + same tz => identical windows.

    Args:
        now: Reference instant (defaults to wall-clock). Naive values are read
             as local time in tz.
        tz: IANA name or ZoneInfo (defaults to BUSINESS_TIMEZONE)

    Returns:
        TimeWindows (immutable)
    """
    zone = resolve_timezone(tz)
    if now is None:
        local_now = datetime.now(zone)
    elif now.tzinfo is None:
        local_now = now.replace(tzinfo=zone)
    else:
        local_now = now.astimezone(zone)

    today = local_now.date()
    # Calendar arithmetic on dates, not +24h, so DST days keep real midnights
    return TimeWindows(
        now=local_now,
        today_start=_midnight(today, zone),
        today_end=_midnight(today + timedelta(days=1), zone),
        week_start=_midnight(start_of_week(today), zone),
        month_start=_midnight(today.replace(day=1), zone),
    )
