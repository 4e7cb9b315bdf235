"""Run-once document triggers for both trigger generations."""

from __future__ import annotations

from . import v1, v2
from .base import DeliveryOutcome, EventDescriptor, OnceTrigger, TriggerFactory
from .options import TriggerOptions

__all__ = [
    "DeliveryOutcome",
    "EventDescriptor",
    "OnceTrigger",
    "TriggerFactory",
    "TriggerOptions",
    "v1",
    "v2",
]
