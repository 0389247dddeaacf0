"""
Health endpoints for the SalonPro backend.

Lightweight liveness and readiness checks that never expose secrets.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.core.errors import StoreUnavailableError
from backend.core.logging import latency_bucket_ms
from backend.features.store.record_store import get_store

logger = logging.getLogger("salonpro")

root_router = APIRouter(tags=["health"])


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@root_router.get("/readyz")
def readyz():
    """Readiness check: record store reachable."""
    start = time.perf_counter()
    try:
        store = get_store()
        store.ping()
    except StoreUnavailableError as e:
        logger.error(f"[readyz] readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "record store unreachable"})

    latency = latency_bucket_ms((time.perf_counter() - start) * 1000)
    return {"status": "ok", "store": type(store).__name__, "latency_bucket": latency}
