"""Unit tests for the HTTP delivery surface."""

from __future__ import annotations

import asyncio
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from firestore_once.config import Settings, TriggerConfig
from firestore_once.events.guard import DedupGuard
from firestore_once.events.models import Change, CloudEvent, DocumentSnapshot, EventContext
from firestore_once.main import create_app
from firestore_once.storage import InMemoryStorage
from firestore_once.triggers import v1, v2


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def handlers():
    return {"welcome": AsyncMock(), "audit": AsyncMock(), "fail": AsyncMock(side_effect=RuntimeError("boom"))}


@pytest.fixture
def client(storage, handlers):
    guard = DedupGuard(storage)
    settings = Settings()
    first_gen = v1.Triggers(guard, settings=settings)
    second_gen = v2.Triggers(guard, settings=settings)
    triggers = {
        "welcome": first_gen.on_create_once("users/{userId}", handlers["welcome"]),
        "audit": second_gen.on_update_once("users/{userId}", handlers["audit"]),
        "fail": second_gen.on_delete_once("users/{userId}", handlers["fail"]),
    }
    app = create_app(triggers, storage=storage, settings=settings)
    with TestClient(app) as test_client:
        yield test_client


def test_v1_delivery_is_handled_once(client, handlers):
    body = {
        "id": str(uuid.uuid4()),
        "document": "users/aric",
        "params": {"userId": "aric"},
        "value": {"name": "aric"},
    }

    first = client.post("/triggers/welcome", json=body)
    second = client.post("/triggers/welcome", json=body)

    assert first.status_code == 200
    assert first.json() == {"event_id": body["id"], "outcome": "handled"}
    assert second.json()["outcome"] == "duplicate"
    handlers["welcome"].assert_awaited_once()
    snapshot, context = handlers["welcome"].await_args.args
    assert snapshot == DocumentSnapshot("users/aric", {"name": "aric"})
    assert isinstance(context, EventContext)
    assert context.event_id == body["id"]
    assert context.event_type == "providers/cloud.firestore/eventTypes/document.create"
    assert context.params == {"userId": "aric"}


def test_v2_delivery_builds_cloud_event(client, handlers):
    body = {
        "id": str(uuid.uuid4()),
        "type": "google.cloud.firestore.document.v1.updated",
        "document": "users/aric",
        "value": {"name": "juice"},
        "old_value": {"name": "aric"},
    }

    response = client.post("/triggers/audit", json=body)

    assert response.json()["outcome"] == "handled"
    (event,) = handlers["audit"].await_args.args
    assert isinstance(event, CloudEvent)
    assert event.id == body["id"]
    assert event.subject == "documents/users/aric"
    assert event.data == Change(
        before=DocumentSnapshot("users/aric", {"name": "aric"}),
        after=DocumentSnapshot("users/aric", {"name": "juice"}),
    )


def test_unknown_trigger(client):
    response = client.post("/triggers/nope", json={"id": "1", "document": "users/aric"})

    assert response.status_code == 404


def test_malformed_delivery(client, handlers):
    response = client.post("/triggers/welcome", json={"document": "users/aric"})

    assert response.status_code == 422
    handlers["welcome"].assert_not_called()


def test_handler_failure_is_reported_and_redelivery_dropped(client, handlers):
    body = {"id": str(uuid.uuid4()), "document": "users/aric", "old_value": {"name": "aric"}}

    failed = client.post("/triggers/fail", json=body)
    retried = client.post("/triggers/fail", json=body)

    assert failed.status_code == 500
    assert "boom" in failed.json()["detail"]
    assert retried.json()["outcome"] == "duplicate"
    handlers["fail"].assert_awaited_once()


def test_health(client):
    response = client.get("/admin/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["triggers"] == 3


def test_config_lists_triggers(client):
    response = client.get("/admin/config")

    payload = response.json()
    assert payload["storage_backend"] == "in_memory"
    assert payload["firestore_events_path"] == "firestore-events"
    assert [trigger["name"] for trigger in payload["triggers"]] == ["audit", "fail", "welcome"]
    assert payload["triggers"][2]["generation"] == "v1"


def test_ready(client):
    response = client.get("/admin/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "timeout_ms": 1000}


def test_not_ready_when_storage_read_is_slow():
    async def slow_get(collection, document_id):
        await asyncio.sleep(0.3)

    storage = MagicMock()
    storage.get_document = slow_get
    settings = Settings(triggers=TriggerConfig(timeout_ms=20))
    app = create_app({}, storage=storage, settings=settings)

    with TestClient(app) as client:
        response = client.get("/admin/ready")

    assert response.status_code == 503
    assert "more than 20 ms" in response.json()["detail"]


def test_ready_reads_the_store_behind_the_triggers():
    async def hanging_get(collection, document_id):
        await asyncio.sleep(0.3)

    storage = MagicMock()
    storage.get_document = hanging_get
    settings = Settings(triggers=TriggerConfig(timeout_ms=20))
    trigger = v1.Triggers(DedupGuard(storage), settings=settings).on_create_once(
        "users/{userId}", AsyncMock()
    )
    app = create_app({"welcome": trigger}, settings=settings)

    assert app.state.storage is storage
    with TestClient(app) as client:
        response = client.get("/admin/ready")

    assert response.status_code == 503


def test_store_is_built_from_settings_without_triggers():
    app = create_app({}, settings=Settings())

    assert isinstance(app.state.storage, InMemoryStorage)
