"""1st gen document triggers: handlers receive ``(snapshot_or_change, context)``."""

from __future__ import annotations

from typing import Union

from ..events.models import V1_EVENT_TYPES, Change, DocumentSnapshot, EventContext, EventKind
from .base import EventDescriptor, TriggerFactory, predicate_args


class Triggers(TriggerFactory):
    generation = "v1"
    event_types = V1_EVENT_TYPES

    @staticmethod
    def adapt(
        kind: EventKind, payload: Union[DocumentSnapshot, Change], context: EventContext
    ) -> EventDescriptor:
        return EventDescriptor(
            event_id=context.event_id,
            event_type=context.event_type,
            predicate_args=predicate_args(kind, payload),
        )
