"""
backend/tests/test_logging_context.py

Structured logging: request id correlation and formatter output.
"""

import json
import logging

from backend.core.logging import (
    LOGGER_NAME,
    JsonFormatter,
    RequestIdFilter,
    latency_bucket_ms,
    log_event,
    request_id_ctx_var,
)


def test_log_event_carries_context_request_id(caplog):
    token = request_id_ctx_var.set("rid-abc")
    try:
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            log_event("info", "bill.created", user_id="owner-1", event_type="bill", extra={"bill_id": "b1"})
    finally:
        request_id_ctx_var.reset(token)

    record = next(r for r in caplog.records if r.getMessage() == "bill.created")
    assert record.request_id == "rid-abc"
    assert record.user_id == "owner-1"
    assert record.bill_id == "b1"


def test_log_event_truncates_large_values(caplog):
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        log_event("info", "big.payload", extra={"blob": "x" * 2000})

    record = next(r for r in caplog.records if r.getMessage() == "big.payload")
    assert record.blob.endswith("...<truncated>")
    assert len(record.blob) < 600


def test_json_formatter_emits_structured_fields():
    record = logging.LogRecord(LOGGER_NAME, logging.WARNING, __file__, 1, "app.error", None, None)
    record.error_code = "not_editable"
    record.status = 409
    RequestIdFilter().filter(record)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "app.error"
    assert payload["level"] == "WARNING"
    assert payload["error_code"] == "not_editable"
    assert payload["status"] == 409
    assert "request_id" in payload


def test_latency_buckets():
    assert latency_bucket_ms(None) == "unknown"
    assert latency_bucket_ms(5) == "<10ms"
    assert latency_bucket_ms(50) == "10-100ms"
    assert latency_bucket_ms(5000) == ">=1000ms"


def test_request_completion_logged_with_request_id(client, caplog):
    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        client.get("/healthz", headers={"x-request-id": "rid-health"})

    completions = [r for r in caplog.records if r.getMessage() == "request.complete"]
    assert completions
    assert completions[-1].request_id == "rid-health"
    assert completions[-1].path == "/healthz"
