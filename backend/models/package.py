"""
backend/models/package.py
Service package records and request schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PackageType(str, Enum):
    BASIC = "Basic"
    PREMIUM = "Premium"


class Package(BaseModel):
    """A service package owned by one salon user."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    name: str
    type: PackageType
    price: float = Field(ge=0, description="Non-negative currency amount")
    description: str = ""
    created_at: datetime
    updated_at: datetime


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("name must not be blank")
    return value


class PackageCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: str = Field(max_length=200)
    type: PackageType
    price: float = Field(ge=0)
    description: str = Field(default="", max_length=2000)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator("price")
    @classmethod
    def _two_decimals(cls, v: float) -> float:
        return round(v, 2)


class PackageUpdateRequest(BaseModel):
    """Partial update: omitted fields keep their current value."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    name: Optional[str] = Field(default=None, max_length=200)
    type: Optional[PackageType] = None
    price: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v)

    @field_validator("price")
    @classmethod
    def _two_decimals(cls, v: Optional[float]) -> Optional[float]:
        return None if v is None else round(v, 2)
