"""Admin health and readiness endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Request, status

from ..concurrency.timeout import FunctionTimeoutError, with_timeout

router = APIRouter(prefix="/admin", tags=["admin"])

_PROBE_DOCUMENT = "__readiness_probe__"


@router.get("/health")
async def health(request: Request) -> dict[str, int | str]:
    start_time = getattr(request.app.state, "start_time", None)
    if start_time:
        uptime = int((datetime.now(timezone.utc) - start_time).total_seconds())
    else:
        uptime = 0
    return {
        "status": "healthy",
        "uptime_seconds": uptime,
        "version": request.app.version,
        "triggers": len(request.app.state.triggers),
    }


@router.get("/ready")
async def ready(request: Request) -> dict[str, Any]:
    """Read from the events collection within the configured time limit."""
    settings = request.app.state.settings
    storage = request.app.state.storage
    probe = with_timeout(storage.get_document, settings.triggers.timeout_ms)
    try:
        await probe(settings.triggers.firestore_events_path, _PROBE_DOCUMENT)
    except FunctionTimeoutError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return {"status": "ready", "timeout_ms": settings.triggers.timeout_ms}
