"""
backend/api/bills.py
Bill CRUD. Update and delete are limited to the caller's 15 most recent bills;
the check is re-run at write time, so a stale client gets 409 not_editable.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from backend.core.auth import get_current_user_id
from backend.features.bills.service import (
    list_bills,
    create_bill,
    update_bill,
    delete_bill,
)
from backend.models.bill import BillCreateRequest, BillUpdateRequest

router = APIRouter()


@router.get("", response_model=Dict[str, Any])
def get_bills(user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    """List the caller's bills, newest first, each flagged editable or not."""
    bills = list_bills(user_id)
    return {"bills": [b.model_dump(mode="json", by_alias=True) for b in bills]}


@router.post("", status_code=201, response_model=Dict[str, Any])
def post_bill(body: BillCreateRequest, user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    """Check out: snapshot the selected packages into a new bill."""
    bill = create_bill(user_id, body)
    return {"bill": bill.model_dump(mode="json", by_alias=True)}


@router.put("/{bill_id}", response_model=Dict[str, Any])
def put_bill(
    bill_id: str,
    body: BillUpdateRequest,
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    bill = update_bill(user_id, bill_id, body)
    return {"bill": bill.model_dump(mode="json", by_alias=True)}


@router.delete("/{bill_id}", response_model=Dict[str, Any])
def remove_bill(bill_id: str, user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    delete_bill(user_id, bill_id)
    return {"deleted": True}
