"""
Bill service.
- list_bills(user_id) with editability flags
- create_bill / update_bill / delete_bill

Items are snapshots of the caller's packages at write time; totals are derived.
Update and delete re-check editability inside the store's critical section.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import uuid4

from backend.core.errors import ValidationError
from backend.core.logging import log_event
from backend.features.bills.policy import ensure_editable, is_editable, rank_bills
from backend.features.store.record_store import RecordStore, get_store
from backend.models.bill import Bill, BillCreateRequest, BillItem, BillUpdateRequest, BillView, bill_total


def _now_or_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def snapshot_items(user_id: str, package_ids: Sequence[str], store: RecordStore) -> List[BillItem]:
    """Copy name/type/price of each requested package, in request order."""
    found = store.get_packages(user_id, package_ids)
    missing = [pid for pid in package_ids if pid not in found]
    if missing:
        raise ValidationError(f"Unknown package ids: {', '.join(sorted(set(missing)))}")
    return [BillItem.snapshot(found[pid]) for pid in package_ids]


def list_bills(user_id: str, store: Optional[RecordStore] = None) -> List[BillView]:
    records = store or get_store()
    return [
        BillView(**bill.model_dump(), editable=is_editable(bill, rank))
        for rank, bill in rank_bills(records.list_bills(user_id))
    ]


def create_bill(
    user_id: str,
    request: BillCreateRequest,
    now: Optional[datetime] = None,
    store: Optional[RecordStore] = None,
) -> Bill:
    records = store or get_store()
    now_dt = _now_or_utc(now)
    items = snapshot_items(user_id, request.package_ids, records)
    bill = Bill(
        id=str(uuid4()),
        user_id=user_id,
        items=items,
        total_amount=bill_total(items),
        created_at=now_dt,
        updated_at=now_dt,
    )
    records.add_bill(bill)
    log_event("info", "bill.created", user_id=user_id, event_type="bill", extra={"bill_id": bill.id, "items": len(items)})
    return bill


def update_bill(
    user_id: str,
    bill_id: str,
    request: BillUpdateRequest,
    now: Optional[datetime] = None,
    store: Optional[RecordStore] = None,
) -> Bill:
    records = store or get_store()
    now_dt = _now_or_utc(now)
    items = snapshot_items(user_id, request.package_ids, records)

    def build(current: Bill, rank: int) -> Bill:
        ensure_editable(current, rank)
        return Bill(
            id=current.id,
            user_id=current.user_id,
            items=items,
            total_amount=bill_total(items),
            created_at=current.created_at,
            updated_at=max(now_dt, current.created_at),
        )

    updated = records.update_bill(user_id, bill_id, build)
    log_event("info", "bill.updated", user_id=user_id, event_type="bill", extra={"bill_id": bill_id})
    return updated


def delete_bill(user_id: str, bill_id: str, store: Optional[RecordStore] = None) -> None:
    records = store or get_store()
    records.delete_bill(user_id, bill_id, ensure_editable)
    log_event("info", "bill.deleted", user_id=user_id, event_type="bill", extra={"bill_id": bill_id})
