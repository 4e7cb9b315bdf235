"""Run-once trigger algorithm shared by every trigger generation and event kind."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Union

from ..config import Settings, get_settings
from ..events.guard import DedupGuard
from ..events.models import Change, DocumentSnapshot, EventKind
from ..validation.validator import ArgumentError
from .options import TriggerOptions, resolve_options

logger = logging.getLogger(__name__)


class DeliveryOutcome(str, Enum):
    SKIPPED = "skipped"
    DUPLICATE = "duplicate"
    HANDLED = "handled"


@dataclass(frozen=True)
class EventDescriptor:
    event_id: str
    event_type: str
    predicate_args: tuple[Any, ...]


# Maps (kind, *delivery_args) to the descriptor used for filtering and claiming.
EventAdapter = Callable[..., EventDescriptor]


def predicate_args(kind: EventKind, payload: Union[DocumentSnapshot, Change]) -> tuple[Any, ...]:
    if kind.has_change:
        return (payload.after.to_dict(), payload.before.to_dict())
    return (payload.to_dict(),)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class OnceTrigger:
    """A trigger definition whose handler runs at most once per event ID."""

    def __init__(
        self,
        *,
        path: str,
        kind: EventKind,
        generation: str,
        event_type: str,
        handler: Callable[..., Any],
        adapter: EventAdapter,
        guard: DedupGuard,
        options: TriggerOptions,
    ) -> None:
        self.path = path
        self.kind = kind
        self.generation = generation
        self.event_type = event_type
        self.firestore_events_path = options.firestore_events_path
        self.runtime_options: Mapping[str, Any] = options.runtime_options or {}
        self._handler = handler
        self._adapter = adapter
        self._guard = guard
        self._should_handle_event = options.should_handle_event

    def __repr__(self) -> str:
        return f"OnceTrigger({self.generation} {self.kind.value} {self.path!r})"

    @property
    def guard(self) -> DedupGuard:
        return self._guard

    def describe(self, *args: Any) -> EventDescriptor:
        return self._adapter(self.kind, *args)

    async def __call__(self, *args: Any) -> DeliveryOutcome:
        descriptor = self.describe(*args)
        if self._should_handle_event is not None:
            should = await _resolve(self._should_handle_event(*descriptor.predicate_args))
            if not should:
                logger.debug("event %s not applicable to %r", descriptor.event_id, self)
                return DeliveryOutcome.SKIPPED

        claimed = await self._guard.setnx(
            self.firestore_events_path,
            descriptor.event_id,
            {"eventType": descriptor.event_type},
        )
        if not claimed:
            logger.info("event %s already claimed, dropping delivery", descriptor.event_id)
            return DeliveryOutcome.DUPLICATE

        await _resolve(self._handler(*args))
        logger.info("event %s handled by %r", descriptor.event_id, self)
        return DeliveryOutcome.HANDLED


def assert_args(path: Any, handler: Any) -> None:
    if not path or not isinstance(path, str):
        raise ArgumentError('"path" must be a non-empty string')
    if not callable(handler):
        raise ArgumentError('"handler" must be callable')


class TriggerFactory:
    """Builds the four run-once triggers for one trigger generation.

    Subclasses provide ``generation``, ``event_types`` and an ``adapt``
    staticmethod that turns a delivery into an EventDescriptor.
    """

    generation: str
    event_types: Mapping[EventKind, str]

    def __init__(self, guard: DedupGuard, *, settings: Settings | None = None) -> None:
        self._guard = guard
        self._settings = settings or get_settings()

    @staticmethod
    def adapt(kind: EventKind, *args: Any) -> EventDescriptor:
        raise NotImplementedError

    def _build(
        self,
        kind: EventKind,
        path: str,
        handler: Callable[..., Any],
        options: TriggerOptions | Mapping[str, Any] | None,
    ) -> OnceTrigger:
        assert_args(path, handler)
        resolved = resolve_options(
            options,
            firestore_events_path=self._settings.triggers.firestore_events_path,
        )
        return OnceTrigger(
            path=path,
            kind=kind,
            generation=self.generation,
            event_type=self.event_types[kind],
            handler=handler,
            adapter=self.adapt,
            guard=self._guard,
            options=resolved,
        )

    def on_create_once(self, path, handler, options=None) -> OnceTrigger:
        """Triggered when a document is written for the first time, at most once per event."""
        return self._build(EventKind.CREATE, path, handler, options)

    def on_update_once(self, path, handler, options=None) -> OnceTrigger:
        """Triggered when an existing document changes, at most once per event."""
        return self._build(EventKind.UPDATE, path, handler, options)

    def on_delete_once(self, path, handler, options=None) -> OnceTrigger:
        """Triggered when a document with data is deleted, at most once per event."""
        return self._build(EventKind.DELETE, path, handler, options)

    def on_write_once(self, path, handler, options=None) -> OnceTrigger:
        """Triggered on create, update or delete, at most once per event."""
        return self._build(EventKind.WRITE, path, handler, options)
