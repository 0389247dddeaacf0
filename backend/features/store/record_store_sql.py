"""
backend/features/store/record_store_sql.py

SQLAlchemy-backed record store.

Maintains identical interface to InMemoryRecordStore. Each bill is one row with
its line items held as a JSON document. All datetimes are written in UTC and
returned tz-aware; any SQLAlchemyError surfaces as StoreUnavailableError so a
failing database fails the whole request rather than yielding partial data.
"""

from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select, insert, update, delete, and_, or_, func, inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from backend.core.database import create_all_tables, get_db_session, packages, bills, users
from backend.core.errors import AppError, ConflictError, NotFoundError, StoreUnavailableError
from backend.features.store.record_store import BillBuilder, BillCheck, to_utc
from backend.models.bill import Bill, BillItem
from backend.models.package import Package
from backend.models.user import User


def _money(value) -> float:
    if isinstance(value, Decimal):
        return float(round(value, 2))
    return round(float(value), 2)


def _row_to_bill(row) -> Bill:
    return Bill(
        id=row.id,
        user_id=row.user_id,
        items=[BillItem.model_validate(item) for item in (row.items or [])],
        total_amount=_money(row.total_amount),
        created_at=to_utc(row.created_at),
        updated_at=to_utc(row.updated_at),
    )


def _row_to_package(row) -> Package:
    return Package(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        type=row.type,
        price=_money(row.price),
        description=row.description or "",
        created_at=to_utc(row.created_at),
        updated_at=to_utc(row.updated_at),
    )


def _row_to_user(row) -> User:
    return User(
        user_id=row.user_id,
        email=row.email,
        name=row.name,
        password_hash=row.password_hash,
        created_at=to_utc(row.created_at),
    )


def _bill_values(bill: Bill) -> Dict:
    return {
        "id": bill.id,
        "user_id": bill.user_id,
        "items": [item.model_dump(mode="json") for item in bill.items],
        "total_amount": Decimal(str(bill.total_amount)),
        "created_at": to_utc(bill.created_at),
        "updated_at": to_utc(bill.updated_at),
    }


def _package_values(package: Package) -> Dict:
    return {
        "id": package.id,
        "user_id": package.user_id,
        "name": package.name,
        "type": package.type.value,
        "price": Decimal(str(package.price)),
        "description": package.description,
        "created_at": to_utc(package.created_at),
        "updated_at": to_utc(package.updated_at),
    }


class SqlRecordStore:
    """
    Relational record store (PostgreSQL in production, SQLite in tests).

    With create_schema=True the tables are created on the first call that
    reaches the database, so a store built while the database is down starts
    working once it comes back.
    """

    def __init__(self, create_schema: bool = False) -> None:
        self._schema_pending = create_schema

    @contextmanager
    def _session(self):
        try:
            if self._schema_pending:
                create_all_tables()
                self._schema_pending = False
            with get_db_session() as session:
                yield session
        except AppError:
            raise
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Record store unavailable") from e

    @staticmethod
    def _newer_than(bill_row):
        """Bills ranked ahead of bill_row in (created_at, id) descending order."""
        return and_(
            bills.c.user_id == bill_row.user_id,
            or_(
                bills.c.created_at > bill_row.created_at,
                and_(bills.c.created_at == bill_row.created_at, bills.c.id > bill_row.id),
            ),
        )

    def _load_owned_bill_with_rank(self, session, user_id: str, bill_id: str):
        query = select(bills).where(and_(bills.c.id == bill_id, bills.c.user_id == user_id))
        if session.get_bind().dialect.name != "sqlite":
            query = query.with_for_update()
        row = session.execute(query).first()
        if row is None:
            raise NotFoundError(f"Bill {bill_id} not found")
        rank = session.execute(select(func.count()).select_from(bills).where(self._newer_than(row))).scalar_one()
        return row, int(rank)

    # ----- bills -----

    def count_bills(self, user_id: str) -> int:
        with self._session() as session:
            return int(session.execute(
                select(func.count()).select_from(bills).where(bills.c.user_id == user_id)
            ).scalar_one())

    def find_bills_created_between(self, user_id: str, start: datetime, end: Optional[datetime] = None) -> List[Bill]:
        filters = [bills.c.user_id == user_id, bills.c.created_at >= to_utc(start)]
        if end is not None:
            filters.append(bills.c.created_at < to_utc(end))
        query = select(bills).where(and_(*filters)).order_by(bills.c.created_at, bills.c.id)
        with self._session() as session:
            return [_row_to_bill(row) for row in session.execute(query)]

    def find_most_recent_bills(self, user_id: str, limit: int) -> List[Bill]:
        if limit <= 0:
            return []
        query = (
            select(bills)
            .where(bills.c.user_id == user_id)
            .order_by(bills.c.created_at.desc(), bills.c.id.desc())
            .limit(limit)
        )
        with self._session() as session:
            return [_row_to_bill(row) for row in session.execute(query)]

    def list_bills(self, user_id: str) -> List[Bill]:
        query = (
            select(bills)
            .where(bills.c.user_id == user_id)
            .order_by(bills.c.created_at.desc(), bills.c.id.desc())
        )
        with self._session() as session:
            return [_row_to_bill(row) for row in session.execute(query)]

    def get_bill(self, user_id: str, bill_id: str) -> Optional[Bill]:
        with self._session() as session:
            row = session.execute(
                select(bills).where(and_(bills.c.id == bill_id, bills.c.user_id == user_id))
            ).first()
            return _row_to_bill(row) if row else None

    def add_bill(self, bill: Bill) -> Bill:
        try:
            with self._session() as session:
                session.execute(insert(bills).values(**_bill_values(bill)))
        except IntegrityError:
            raise ConflictError(f"Bill {bill.id} already exists")
        return bill

    def update_bill(self, user_id: str, bill_id: str, build: BillBuilder) -> Bill:
        with self._session() as session:
            row, rank = self._load_owned_bill_with_rank(session, user_id, bill_id)
            updated = build(_row_to_bill(row), rank)
            values = _bill_values(updated)
            session.execute(
                update(bills)
                .where(and_(bills.c.id == bill_id, bills.c.user_id == user_id))
                .values(items=values["items"], total_amount=values["total_amount"], updated_at=values["updated_at"])
            )
            return updated

    def delete_bill(self, user_id: str, bill_id: str, check: BillCheck) -> None:
        with self._session() as session:
            row, rank = self._load_owned_bill_with_rank(session, user_id, bill_id)
            check(_row_to_bill(row), rank)
            session.execute(delete(bills).where(and_(bills.c.id == bill_id, bills.c.user_id == user_id)))

    # ----- packages -----

    def count_packages(self, user_id: str) -> int:
        with self._session() as session:
            return int(session.execute(
                select(func.count()).select_from(packages).where(packages.c.user_id == user_id)
            ).scalar_one())

    def list_packages(self, user_id: str) -> List[Package]:
        query = (
            select(packages)
            .where(packages.c.user_id == user_id)
            .order_by(packages.c.created_at.desc(), packages.c.id.desc())
        )
        with self._session() as session:
            return [_row_to_package(row) for row in session.execute(query)]

    def get_package(self, user_id: str, package_id: str) -> Optional[Package]:
        with self._session() as session:
            row = session.execute(
                select(packages).where(and_(packages.c.id == package_id, packages.c.user_id == user_id))
            ).first()
            return _row_to_package(row) if row else None

    def get_packages(self, user_id: str, package_ids: Sequence[str]) -> Dict[str, Package]:
        ids = list(set(package_ids))
        if not ids:
            return {}
        with self._session() as session:
            rows = session.execute(
                select(packages).where(and_(packages.c.user_id == user_id, packages.c.id.in_(ids)))
            )
            return {row.id: _row_to_package(row) for row in rows}

    def add_package(self, package: Package) -> Package:
        try:
            with self._session() as session:
                session.execute(insert(packages).values(**_package_values(package)))
        except IntegrityError:
            raise ConflictError(f"Package {package.id} already exists")
        return package

    def update_package(self, package: Package) -> Package:
        values = _package_values(package)
        with self._session() as session:
            result = session.execute(
                update(packages)
                .where(and_(packages.c.id == package.id, packages.c.user_id == package.user_id))
                .values(
                    name=values["name"],
                    type=values["type"],
                    price=values["price"],
                    description=values["description"],
                    updated_at=values["updated_at"],
                )
            )
            if result.rowcount == 0:
                raise NotFoundError(f"Package {package.id} not found")
        return package

    def delete_package(self, user_id: str, package_id: str) -> None:
        with self._session() as session:
            result = session.execute(
                delete(packages).where(and_(packages.c.id == package_id, packages.c.user_id == user_id))
            )
            if result.rowcount == 0:
                raise NotFoundError(f"Package {package_id} not found")

    # ----- accounts -----

    def add_user(self, user: User) -> User:
        try:
            with self._session() as session:
                session.execute(
                    insert(users).values(
                        user_id=user.user_id,
                        email=user.email,
                        name=user.name,
                        password_hash=user.password_hash,
                        created_at=to_utc(user.created_at),
                    )
                )
        except IntegrityError:
            raise ConflictError("An account with this email already exists")
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._session() as session:
            row = session.execute(
                select(users).where(users.c.email == User.normalized_email(email))
            ).first()
            return _row_to_user(row) if row else None

    def ping(self) -> bool:
        """Reachable and schema present; raises StoreUnavailableError otherwise."""
        with self._session() as session:
            inspector = inspect(session.get_bind())
            missing = [t.name for t in (users, packages, bills) if not inspector.has_table(t.name)]
        if missing:
            raise StoreUnavailableError(f"Record store missing tables: {', '.join(missing)}")
        return True

    def clear(self) -> None:
        """
        Delete all rows.
        FOR TESTING ONLY.
        """
        with self._session() as session:
            session.execute(bills.delete())
            session.execute(packages.delete())
            session.execute(users.delete())
