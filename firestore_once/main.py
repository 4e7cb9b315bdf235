from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Mapping

from fastapi import Body, Depends, FastAPI, HTTPException, Request

from .admin import config as admin_config
from .admin import health as admin_health
from .config import Settings, get_settings
from .events.delivery import delivery_args
from .storage import DocumentStorage, build_storage
from .triggers.base import OnceTrigger
from .validation.validator import ArgumentError

logger = logging.getLogger(__name__)


def create_app(
    triggers: Mapping[str, OnceTrigger],
    *,
    storage: DocumentStorage | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build an application that receives deliveries for the named triggers.

    The readiness probe reads ``storage``, which defaults to the store behind
    the triggers' guard. A store is built from settings only when there are
    no triggers.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.getLogger("firestore_once").setLevel(settings.logging.level)
        app.state.start_time = datetime.now(timezone.utc)
        yield

    app = FastAPI(
        title="firestore-once",
        version="1.0.0",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if storage is None:
        storage = _trigger_storage(triggers)
    if storage is None:
        storage = build_storage(settings)
    app.state.storage = storage
    app.state.triggers = dict(triggers)

    app.include_router(admin_health.router)
    app.include_router(admin_config.router)
    app.add_api_route(
        "/triggers/{name}",
        deliver,
        methods=["POST"],
        tags=["triggers"],
    )
    return app


def _trigger_storage(triggers: Mapping[str, OnceTrigger]) -> DocumentStorage | None:
    for trigger in triggers.values():
        return trigger.guard.storage
    return None


# Dependency helpers ---------------------------------------------------------


def get_trigger(name: str, request: Request) -> OnceTrigger:
    trigger = request.app.state.triggers.get(name)
    if trigger is None:
        raise HTTPException(status_code=404, detail=f"unknown trigger {name}")
    return trigger


# Routes ---------------------------------------------------------------------


async def deliver(
    payload: dict[str, Any] = Body(...),
    trigger: OnceTrigger = Depends(get_trigger),
) -> dict[str, str]:
    try:
        args = delivery_args(trigger, payload)
    except ArgumentError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    try:
        outcome = await trigger(*args)
    except Exception as exc:
        # A 5xx makes the delivering platform retry the event.
        logger.exception("delivery %s to %r failed", payload.get("id"), trigger)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"event_id": payload["id"], "outcome": outcome.value}
