"""
Package service.
- list_packages / create_package / update_package / delete_package

Bills keep their own item snapshots, so edits and deletes here never touch bills.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from backend.core.errors import NotFoundError
from backend.core.logging import log_event
from backend.features.store.record_store import RecordStore, get_store
from backend.models.package import Package, PackageCreateRequest, PackageUpdateRequest


def _now_or_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def list_packages(user_id: str, store: Optional[RecordStore] = None) -> List[Package]:
    return (store or get_store()).list_packages(user_id)


def create_package(
    user_id: str,
    request: PackageCreateRequest,
    now: Optional[datetime] = None,
    store: Optional[RecordStore] = None,
) -> Package:
    now_dt = _now_or_utc(now)
    package = Package(
        id=str(uuid4()),
        user_id=user_id,
        name=request.name,
        type=request.type,
        price=request.price,
        description=request.description,
        created_at=now_dt,
        updated_at=now_dt,
    )
    (store or get_store()).add_package(package)
    log_event("info", "package.created", user_id=user_id, event_type="package", extra={"package_id": package.id})
    return package


def update_package(
    user_id: str,
    package_id: str,
    request: PackageUpdateRequest,
    now: Optional[datetime] = None,
    store: Optional[RecordStore] = None,
) -> Package:
    records = store or get_store()
    current = records.get_package(user_id, package_id)
    if current is None:
        raise NotFoundError(f"Package {package_id} not found")

    fields = current.model_dump()
    fields.update(request.model_dump(exclude_none=True))
    fields["updated_at"] = max(_now_or_utc(now), current.created_at)
    updated = Package(**fields)
    records.update_package(updated)
    log_event("info", "package.updated", user_id=user_id, event_type="package", extra={"package_id": package_id})
    return updated


def delete_package(user_id: str, package_id: str, store: Optional[RecordStore] = None) -> None:
    (store or get_store()).delete_package(user_id, package_id)
    log_event("info", "package.deleted", user_id=user_id, event_type="package", extra={"package_id": package_id})
