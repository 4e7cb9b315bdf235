"""Decode JSON delivery bodies into the arguments a trigger expects."""

from __future__ import annotations

from typing import Any, Mapping

from ..triggers.base import OnceTrigger
from ..validation.validator import get_schema_registry
from .models import CloudEvent, EventContext, build_payload


def delivery_args(trigger: OnceTrigger, body: Mapping[str, Any]) -> tuple[Any, ...]:
    """Return the positional arguments for ``trigger`` built from ``body``.

    1st gen triggers get ``(payload, EventContext)``; 2nd gen triggers get
    ``(CloudEvent,)``. Missing ``type`` falls back to the trigger's own
    provider event type.
    """
    get_schema_registry().validate("delivery", dict(body), label="body")
    document = body["document"]
    payload = build_payload(trigger.kind, document, body.get("value"), body.get("old_value"))
    event_type = body.get("type") or trigger.event_type
    params = dict(body.get("params") or {})
    if trigger.generation == "v1":
        context = EventContext(
            event_id=body["id"],
            event_type=event_type,
            resource=body.get("source") or document,
            params=params,
            timestamp=body.get("time"),
        )
        return (payload, context)
    event = CloudEvent(
        id=body["id"],
        type=event_type,
        data=payload,
        source=body.get("source", ""),
        subject=body.get("subject") or f"documents/{document}",
        params=params,
        time=body.get("time"),
    )
    return (event,)
