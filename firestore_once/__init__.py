"""Run Firestore document triggers at most once per event."""

from __future__ import annotations

from .concurrency.timeout import FunctionTimeoutError, with_timeout
from .config import Settings, get_settings
from .events.guard import DedupGuard
from .events.models import Change, CloudEvent, DocumentSnapshot, EventContext, EventKind
from .storage import DocumentExistsError, build_storage
from .triggers import DeliveryOutcome, OnceTrigger, TriggerOptions, v1, v2
from .validation.validator import ArgumentError

__all__ = [
    "ArgumentError",
    "Change",
    "CloudEvent",
    "DedupGuard",
    "DeliveryOutcome",
    "DocumentExistsError",
    "DocumentSnapshot",
    "EventContext",
    "EventKind",
    "FunctionTimeoutError",
    "OnceTrigger",
    "Settings",
    "TriggerOptions",
    "build_guard",
    "build_storage",
    "get_settings",
    "v1",
    "v2",
    "with_timeout",
]


def build_guard(settings: Settings | None = None) -> DedupGuard:
    """Open the configured document store and wrap it in a DedupGuard."""
    return DedupGuard(build_storage(settings or get_settings()))
