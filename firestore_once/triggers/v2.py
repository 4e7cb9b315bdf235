"""2nd gen document triggers: handlers receive a single CloudEvent."""

from __future__ import annotations

from ..events.models import V2_EVENT_TYPES, CloudEvent, EventKind
from .base import EventDescriptor, TriggerFactory, predicate_args


class Triggers(TriggerFactory):
    generation = "v2"
    event_types = V2_EVENT_TYPES

    @staticmethod
    def adapt(kind: EventKind, event: CloudEvent) -> EventDescriptor:
        return EventDescriptor(
            event_id=event.id,
            event_type=event.type,
            predicate_args=predicate_args(kind, event.data),
        )
