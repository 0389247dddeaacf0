from datetime import datetime
from typing import Optional
from uuid import uuid4

from backend.core.errors import StoreUnavailableError
from backend.models.bill import Bill, BillItem
from backend.models.package import Package, PackageType


def make_bill(
    user_id: str,
    amount: float,
    created_at: datetime,
    bill_id: Optional[str] = None,
    name: str = "Haircut",
) -> Bill:
    """Single-item bill with the given total."""
    item = BillItem(package_name=name, package_type=PackageType.BASIC, package_price=amount)
    return Bill(
        id=bill_id or str(uuid4()),
        user_id=user_id,
        items=[item],
        total_amount=amount,
        created_at=created_at,
        updated_at=created_at,
    )


def make_package(
    user_id: str,
    price: float,
    created_at: datetime,
    name: str = "Facial",
    type: PackageType = PackageType.PREMIUM,
    package_id: Optional[str] = None,
) -> Package:
    return Package(
        id=package_id or str(uuid4()),
        user_id=user_id,
        name=name,
        type=type,
        price=price,
        description="",
        created_at=created_at,
        updated_at=created_at,
    )


class UnreachableStore:
    """Store double whose every read fails like a dropped database connection."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise StoreUnavailableError("Record store unavailable")
        return _fail


class FlakyStore:
    """Delegates to a real store but fails one named method."""

    def __init__(self, inner, failing_method: str):
        self._inner = inner
        self._failing_method = failing_method

    def __getattr__(self, name):
        if name == self._failing_method:
            def _fail(*args, **kwargs):
                raise StoreUnavailableError("Record store unavailable")
            return _fail
        return getattr(self._inner, name)
