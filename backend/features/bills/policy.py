"""
Bill editability policy.

Only a user's 15 most recently created bills may be edited or deleted.
Rank is the zero-based position in the user's bills ordered newest first by
(created_at, id), so equal timestamps still give a total, stable order.

The same rule drives the `editable` flag shown to clients and the server-side
check re-run on every update/delete; the flag is advisory only.
"""

from typing import Iterable, List, Tuple

from backend.core.errors import NotEditableError
from backend.features.store.record_store import bill_sort_key
from backend.models.bill import Bill

EDITABLE_BILLS_LIMIT = 15


def is_editable(bill: Bill, rank: int) -> bool:
    if rank < 0:
        raise ValueError(f"rank must be >= 0, got {rank}")
    return rank < EDITABLE_BILLS_LIMIT


def ensure_editable(bill: Bill, rank: int) -> None:
    """Raise NotEditableError unless bill at rank is inside the editable window."""
    if not is_editable(bill, rank):
        raise NotEditableError(
            f"Bill {bill.id} is no longer editable: only the {EDITABLE_BILLS_LIMIT} most recent bills can be changed"
        )


def rank_bills(bills: Iterable[Bill]) -> List[Tuple[int, Bill]]:
    """Newest-first (rank, bill) pairs."""
    ordered = sorted(bills, key=bill_sort_key, reverse=True)
    return list(enumerate(ordered))


def editable_bills(bills: Iterable[Bill]) -> List[Bill]:
    """The editable window: newest first, at most EDITABLE_BILLS_LIMIT bills."""
    return [bill for rank, bill in rank_bills(bills) if is_editable(bill, rank)]
