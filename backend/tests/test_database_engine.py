"""
backend/tests/test_database_engine.py

Engine setup: pool choice per URL, per-session transactions on file SQLite,
and the PostgreSQL driver a bare postgresql:// URL resolves to.
"""

import threading
import time
from datetime import datetime, timezone

import pytest
from sqlalchemy import insert
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from backend.core.database import (
    bills,
    create_all_tables,
    dispose_engine,
    get_db_session,
    init_engine,
    is_memory_sqlite,
)
from backend.features.store.record_store_sql import SqlRecordStore, _bill_values
from backend.tests.mocks import make_bill


@pytest.fixture
def file_store(tmp_path):
    init_engine(f"sqlite:///{tmp_path / 'salon.db'}")
    create_all_tables()
    yield SqlRecordStore()
    dispose_engine()


def test_memory_urls_detected():
    assert is_memory_sqlite("sqlite://")
    assert is_memory_sqlite("sqlite:///:memory:")
    assert not is_memory_sqlite("sqlite:///salon.db")
    assert not is_memory_sqlite("postgresql://u:p@db:5432/salon")


def test_static_pool_only_for_memory_sqlite(tmp_path):
    try:
        assert isinstance(init_engine("sqlite://").pool, StaticPool)
        dispose_engine()
        assert not isinstance(init_engine(f"sqlite:///{tmp_path / 'x.db'}").pool, StaticPool)
    finally:
        dispose_engine()


def test_file_sqlite_rollback_not_committed_by_other_thread(file_store):
    now = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)
    inserted = threading.Event()
    errors = []

    def failing_writer():
        try:
            with get_db_session() as session:
                session.execute(insert(bills).values(**_bill_values(make_bill("owner", 10, now, bill_id="a"))))
                inserted.set()
                time.sleep(0.2)
                raise RuntimeError("abort checkout")
        except RuntimeError:
            pass
        except Exception as e:
            errors.append(e)

    def committing_writer():
        try:
            inserted.wait(timeout=5)
            file_store.add_bill(make_bill("owner", 20, now, bill_id="b"))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=failing_writer), threading.Thread(target=committing_writer)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    assert [b.id for b in file_store.list_bills("owner")] == ["b"]


def test_bare_postgresql_url_uses_declared_driver():
    assert make_url("postgresql://u:p@db:5432/salon").get_dialect().driver == "psycopg2"
