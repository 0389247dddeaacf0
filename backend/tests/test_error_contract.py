"""
backend/tests/test_error_contract.py

Every error response carries {"error": {code, message, request_id}, "detail"}
and echoes the request id header.
"""

from fastapi.testclient import TestClient

from backend.main import app


def _assert_contract(response, code):
    body = response.json()
    assert body["error"]["code"] == code
    assert body["error"]["message"]
    assert body["error"]["request_id"] == response.headers["x-request-id"]
    assert body["detail"] == body["error"]["message"]


def test_unknown_route_404(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    _assert_contract(response, "not_found")


def test_incoming_request_id_is_echoed(client):
    response = client.get("/api/bills", headers={"x-request-id": "rid-123"})

    assert response.status_code == 401
    assert response.headers["x-request-id"] == "rid-123"
    _assert_contract(response, "unauthenticated")


def test_request_validation_lists_fields(client, auth_headers):
    response = client.post("/api/bills", json={"wrong": 1}, headers=auth_headers())

    assert response.status_code == 422
    _assert_contract(response, "request_invalid")
    assert response.json()["error"]["fields"]


def test_not_editable_contract(client, auth_headers, memory_store, fixed_now):
    from datetime import timedelta
    from backend.tests.mocks import make_bill

    for i in range(16):
        memory_store.add_bill(make_bill("owner-1", 10, fixed_now - timedelta(minutes=i), bill_id=f"b{i:02d}"))

    response = client.delete("/api/bills/b15", headers=auth_headers("owner-1"))

    assert response.status_code == 409
    _assert_contract(response, "not_editable")


def test_unhandled_exception_is_opaque_500(monkeypatch, auth_headers):
    import backend.api.dashboard as dashboard_api

    def boom(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(dashboard_api, "compute_dashboard", boom)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/dashboard/analytics", headers=auth_headers())

    assert response.status_code == 500
    body = response.json()
    assert body["error"]["code"] == "internal_error"
    assert "secret internals" not in response.text

