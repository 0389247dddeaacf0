"""
backend/models/bill.py
Bill records. Line items are value snapshots of a package at checkout time,
never live references, so later package edits cannot rewrite history.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from backend.models.package import Package, PackageType


def bill_total(items: List["BillItem"]) -> float:
    return round(sum(item.package_price for item in items), 2)


class BillItem(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    package_name: str
    package_type: PackageType
    package_price: float = Field(ge=0)

    @classmethod
    def snapshot(cls, package: Package) -> "BillItem":
        return cls(
            package_name=package.name,
            package_type=package.type,
            package_price=package.price,
        )


class Bill(BaseModel):
    """A checkout record. total_amount always equals the sum of item prices."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    items: List[BillItem]
    total_amount: float = Field(ge=0)
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _total_matches_items(self) -> "Bill":
        expected = bill_total(self.items)
        if round(self.total_amount, 2) != expected:
            raise ValueError(f"total_amount {self.total_amount} does not match item sum {expected}")
        return self


class BillView(Bill):
    """Bill as listed to its owner, with the editability affordance."""

    editable: bool


class BillCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    package_ids: List[str] = Field(min_length=1, max_length=100)


class BillUpdateRequest(BillCreateRequest):
    pass
