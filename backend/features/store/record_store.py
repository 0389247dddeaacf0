"""
backend/features/store/record_store.py

Record store for packages, bills and accounts.
In-memory implementation plus store selection; the SQL implementation lives in
record_store_sql.py and keeps the identical interface.

Every read and write is scoped by the owning user id. Bills are always ordered
by (created_at, id) so ranks are total and deterministic even on equal timestamps.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from backend.core.errors import NotFoundError, ConflictError
from backend.models.bill import Bill
from backend.models.package import Package
from backend.models.user import User

logger = logging.getLogger("salonpro")

BillBuilder = Callable[[Bill, int], Bill]
BillCheck = Callable[[Bill, int], None]


def to_utc(value: datetime) -> datetime:
    """Normalize to tz-aware UTC (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def bill_sort_key(bill: Bill):
    return (to_utc(bill.created_at), bill.id)


class RecordStore(Protocol):
    """
    Protocol for record stores.

    Implementations must:
    - scope every call by user_id (no cross-user reads or writes)
    - return bills in (created_at, id) order as documented per method
    - raise StoreUnavailableError when the backing store cannot be reached
    """

    def count_packages(self, user_id: str) -> int: ...

    def count_bills(self, user_id: str) -> int: ...

    def find_bills_created_between(self, user_id: str, start: datetime, end: Optional[datetime] = None) -> List[Bill]:
        """Bills with start <= created_at < end (end None = unbounded), ascending."""
        ...

    def find_most_recent_bills(self, user_id: str, limit: int) -> List[Bill]:
        """Newest first, at most `limit`."""
        ...

    def list_bills(self, user_id: str) -> List[Bill]: ...

    def get_bill(self, user_id: str, bill_id: str) -> Optional[Bill]: ...

    def add_bill(self, bill: Bill) -> Bill: ...

    def update_bill(self, user_id: str, bill_id: str, build: BillBuilder) -> Bill:
        """Load bill and its rank, call build(bill, rank), persist the result atomically."""
        ...

    def delete_bill(self, user_id: str, bill_id: str, check: BillCheck) -> None:
        """Load bill and its rank, call check(bill, rank), delete atomically."""
        ...

    def list_packages(self, user_id: str) -> List[Package]: ...

    def get_package(self, user_id: str, package_id: str) -> Optional[Package]: ...

    def get_packages(self, user_id: str, package_ids: Sequence[str]) -> Dict[str, Package]: ...

    def add_package(self, package: Package) -> Package: ...

    def update_package(self, package: Package) -> Package: ...

    def delete_package(self, user_id: str, package_id: str) -> None: ...

    def add_user(self, user: User) -> User: ...

    def get_user_by_email(self, email: str) -> Optional[User]: ...

    def ping(self) -> bool: ...

    def clear(self) -> None: ...


class InMemoryRecordStore:
    """
    Process-local record store.

    A single RLock guards all state, so rank checks and writes in
    update_bill/delete_bill happen in one critical section.
    Models are frozen; lists handed out are fresh copies.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._packages: Dict[str, Package] = {}
        self._bills: Dict[str, Bill] = {}
        self._users: Dict[str, User] = {}

    # ----- bills -----

    def _user_bills(self, user_id: str) -> List[Bill]:
        return [b for b in self._bills.values() if b.user_id == user_id]

    def _rank(self, bill: Bill) -> int:
        key = bill_sort_key(bill)
        return sum(1 for b in self._user_bills(bill.user_id) if bill_sort_key(b) > key)

    def _owned_bill(self, user_id: str, bill_id: str) -> Bill:
        bill = self._bills.get(bill_id)
        if bill is None or bill.user_id != user_id:
            raise NotFoundError(f"Bill {bill_id} not found")
        return bill

    def count_bills(self, user_id: str) -> int:
        with self._lock:
            return len(self._user_bills(user_id))

    def find_bills_created_between(self, user_id: str, start: datetime, end: Optional[datetime] = None) -> List[Bill]:
        start_utc = to_utc(start)
        end_utc = to_utc(end) if end is not None else None
        with self._lock:
            matched = [
                b for b in self._user_bills(user_id)
                if to_utc(b.created_at) >= start_utc and (end_utc is None or to_utc(b.created_at) < end_utc)
            ]
        return sorted(matched, key=bill_sort_key)

    def find_most_recent_bills(self, user_id: str, limit: int) -> List[Bill]:
        if limit <= 0:
            return []
        return self.list_bills(user_id)[:limit]

    def list_bills(self, user_id: str) -> List[Bill]:
        with self._lock:
            bills = self._user_bills(user_id)
        return sorted(bills, key=bill_sort_key, reverse=True)

    def get_bill(self, user_id: str, bill_id: str) -> Optional[Bill]:
        with self._lock:
            bill = self._bills.get(bill_id)
        if bill is None or bill.user_id != user_id:
            return None
        return bill

    def add_bill(self, bill: Bill) -> Bill:
        with self._lock:
            if bill.id in self._bills:
                raise ConflictError(f"Bill {bill.id} already exists")
            self._bills[bill.id] = bill
        return bill

    def update_bill(self, user_id: str, bill_id: str, build: BillBuilder) -> Bill:
        with self._lock:
            current = self._owned_bill(user_id, bill_id)
            updated = build(current, self._rank(current))
            self._bills[bill_id] = updated
            return updated

    def delete_bill(self, user_id: str, bill_id: str, check: BillCheck) -> None:
        with self._lock:
            current = self._owned_bill(user_id, bill_id)
            check(current, self._rank(current))
            del self._bills[bill_id]

    # ----- packages -----

    def count_packages(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for p in self._packages.values() if p.user_id == user_id)

    def list_packages(self, user_id: str) -> List[Package]:
        with self._lock:
            owned = [p for p in self._packages.values() if p.user_id == user_id]
        return sorted(owned, key=lambda p: (to_utc(p.created_at), p.id), reverse=True)

    def get_package(self, user_id: str, package_id: str) -> Optional[Package]:
        with self._lock:
            package = self._packages.get(package_id)
        if package is None or package.user_id != user_id:
            return None
        return package

    def get_packages(self, user_id: str, package_ids: Sequence[str]) -> Dict[str, Package]:
        with self._lock:
            return {
                pid: self._packages[pid]
                for pid in set(package_ids)
                if pid in self._packages and self._packages[pid].user_id == user_id
            }

    def add_package(self, package: Package) -> Package:
        with self._lock:
            if package.id in self._packages:
                raise ConflictError(f"Package {package.id} already exists")
            self._packages[package.id] = package
        return package

    def update_package(self, package: Package) -> Package:
        with self._lock:
            if self.get_package(package.user_id, package.id) is None:
                raise NotFoundError(f"Package {package.id} not found")
            self._packages[package.id] = package
        return package

    def delete_package(self, user_id: str, package_id: str) -> None:
        with self._lock:
            if self.get_package(user_id, package_id) is None:
                raise NotFoundError(f"Package {package_id} not found")
            del self._packages[package_id]

    # ----- accounts -----

    def add_user(self, user: User) -> User:
        with self._lock:
            if any(u.email == user.email for u in self._users.values()):
                raise ConflictError("An account with this email already exists")
            self._users[user.user_id] = user
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        normalized = User.normalized_email(email)
        with self._lock:
            for user in self._users.values():
                if user.email == normalized:
                    return user
        return None

    def ping(self) -> bool:
        return True

    def clear(self) -> None:
        """
        Clear all records.
        FOR TESTING ONLY.
        """
        with self._lock:
            self._packages.clear()
            self._bills.clear()
            self._users.clear()



# ============================================================================
# Store selection
# ============================================================================

def get_record_store() -> RecordStore:
    """
    Get the appropriate record store implementation.

    - SQL whenever DATABASE_URL (or TEST_DATABASE_URL) is configured, reachable or not:
      an unreachable database surfaces as StoreUnavailableError on each call
    - In-memory only when no database is configured
    - Services and API are agnostic to implementation
    """
    from backend.core.database import get_database_url

    if get_database_url():
        from backend.features.store.record_store_sql import SqlRecordStore
        from backend.core.database import check_connection

        if not check_connection():
            logger.error("[record_store] database unreachable; requests will fail until it recovers")
        return SqlRecordStore(create_schema=True)

    return InMemoryRecordStore()


# Global store instance (lazy initialization)
_store_instance: Optional[RecordStore] = None


def get_store() -> RecordStore:
    """
    Get the singleton record store instance.

    This is the primary API that all consumers should use.
    """
    global _store_instance
    if _store_instance is None:
        _store_instance = get_record_store()
    return _store_instance


def set_store(store: Optional[RecordStore]) -> None:
    """Install a specific store instance. FOR TESTING ONLY."""
    global _store_instance
    _store_instance = store


def reset_store() -> None:
    """
    Reset the store instance.

    FOR TESTING ONLY - forces re-initialization on next get_store() call.
    """
    global _store_instance
    _store_instance = None
