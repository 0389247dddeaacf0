from backend.features.store.record_store import set_store
from backend.tests.mocks import UnreachableStore


def test_healthz_always_ok(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json().get("status") == "ok"


def test_readyz_ok_with_memory_store(client):
    resp = client.get("/readyz")
    body = resp.json()
    assert resp.status_code == 200
    assert body.get("status") == "ok"
    assert body.get("store") == "InMemoryRecordStore"


def test_readyz_ok_with_sql_store(client, sql_store):
    set_store(sql_store)

    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json().get("store") == "SqlRecordStore"


def test_readyz_handles_store_down(client):
    set_store(UnreachableStore())

    resp = client.get("/readyz")
    body = resp.json()
    assert resp.status_code == 503
    assert body.get("status") == "error"
    assert "record store" in body.get("detail", "")
