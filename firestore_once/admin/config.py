"""Expose currently loaded settings and registered triggers for debugging."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from ..config import Settings

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.get("/config")
async def config(
    request: Request,
    settings: Settings = Depends(_get_settings),
) -> dict[str, Any]:
    triggers = [
        {
            "name": name,
            "path": trigger.path,
            "kind": trigger.kind.value,
            "generation": trigger.generation,
            "event_type": trigger.event_type,
            "firestore_events_path": trigger.firestore_events_path,
        }
        for name, trigger in sorted(request.app.state.triggers.items())
    ]
    return {
        "version": request.app.version,
        "storage_backend": settings.storage.backend,
        "firestore_events_path": settings.triggers.firestore_events_path,
        "timeout_ms": settings.triggers.timeout_ms,
        "triggers": triggers,
    }
