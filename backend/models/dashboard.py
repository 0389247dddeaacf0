"""
backend/models/dashboard.py
Dashboard read model: rollups over a user's bills plus lifetime counts.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.models.bill import Bill


class DashboardAggregate(BaseModel):
    """Flat aggregate returned by GET /api/dashboard/analytics."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    todays_total_sales: float = Field(ge=0)
    highest_bill_today: Optional[Bill] = Field(default=None, description="None when no bill today is above 0")
    total_packages: int = Field(ge=0)
    total_bills: int = Field(ge=0)
    recent_bills: List[Bill] = Field(description="At most 15, newest first")
    this_weeks_total_sales: float = Field(ge=0)
    this_months_total_sales: float = Field(ge=0)
    todays_bills_count: int = Field(ge=0)
