# backend/conftest.py
import sys
import os
import pytest
from datetime import datetime, timezone
from pathlib import Path

# Add repo root to PYTHONPATH so `backend.*` imports resolve without install
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# Tests always run against in-memory stores unless a test opts into SQLite
os.environ.pop("DATABASE_URL", None)
os.environ.pop("TEST_DATABASE_URL", None)


@pytest.fixture(scope="function", autouse=True)
def memory_store():
    """
    Fresh in-memory record store for every test.

    Installed as the process store so API routes and services share it.
    """
    from backend.features.store.record_store import InMemoryRecordStore, set_store, reset_store

    store = InMemoryRecordStore()
    set_store(store)
    yield store
    reset_store()


@pytest.fixture
def fixed_now():
    """Fixed reference instant: Wednesday 2026-10-14 15:30 UTC (week starts Sun 11th)."""
    return datetime(2026, 10, 14, 15, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def sql_store():
    """
    SqlRecordStore on a private in-memory SQLite database.

    Tables are created per test and the engine is disposed afterwards.
    """
    from backend.core.database import init_engine, create_all_tables, drop_all_tables, dispose_engine
    from backend.features.store.record_store_sql import SqlRecordStore

    init_engine("sqlite://")
    create_all_tables()
    yield SqlRecordStore()
    drop_all_tables()
    dispose_engine()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from backend.main import app

    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a user id."""
    from backend.core.auth import issue_access_token

    def _headers(user_id: str = "owner-1") -> dict:
        return {"Authorization": f"Bearer {issue_access_token(user_id)}"}

    return _headers
