"""Document change payloads delivered to triggers."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union


class EventKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    WRITE = "write"

    @property
    def has_change(self) -> bool:
        """Update and write deliveries carry a before/after pair."""
        return self in (EventKind.UPDATE, EventKind.WRITE)


# Provider event types, as reported by each trigger generation.
V1_EVENT_TYPES = {
    EventKind.CREATE: "providers/cloud.firestore/eventTypes/document.create",
    EventKind.UPDATE: "providers/cloud.firestore/eventTypes/document.update",
    EventKind.DELETE: "providers/cloud.firestore/eventTypes/document.delete",
    EventKind.WRITE: "providers/cloud.firestore/eventTypes/document.write",
}

V2_EVENT_TYPES = {
    EventKind.CREATE: "google.cloud.firestore.document.v1.created",
    EventKind.UPDATE: "google.cloud.firestore.document.v1.updated",
    EventKind.DELETE: "google.cloud.firestore.document.v1.deleted",
    EventKind.WRITE: "google.cloud.firestore.document.v1.written",
}


@dataclass(frozen=True)
class DocumentSnapshot:
    """Point-in-time copy of a document; ``data`` is None when it does not exist."""

    path: str
    data: Mapping[str, Any] | None = None

    @property
    def id(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def exists(self) -> bool:
        return self.data is not None

    def to_dict(self) -> dict[str, Any] | None:
        if self.data is None:
            return None
        return deepcopy(dict(self.data))


@dataclass(frozen=True)
class Change:
    before: DocumentSnapshot
    after: DocumentSnapshot


@dataclass(frozen=True)
class EventContext:
    """Metadata passed next to the snapshot or change by 1st gen triggers."""

    event_id: str
    event_type: str
    resource: str = ""
    params: Mapping[str, str] = field(default_factory=dict)
    timestamp: str | None = None


@dataclass(frozen=True)
class CloudEvent:
    """Unified event passed to 2nd gen triggers."""

    id: str
    type: str
    data: Union[DocumentSnapshot, Change]
    source: str = ""
    subject: str = ""
    params: Mapping[str, str] = field(default_factory=dict)
    time: str | None = None


def build_payload(
    kind: EventKind,
    document: str,
    value: Mapping[str, Any] | None,
    old_value: Mapping[str, Any] | None,
) -> Union[DocumentSnapshot, Change]:
    """Shape raw before/after document data into the payload for ``kind``."""
    if kind.has_change:
        return Change(
            before=DocumentSnapshot(document, old_value),
            after=DocumentSnapshot(document, value),
        )
    if kind is EventKind.DELETE:
        return DocumentSnapshot(document, old_value)
    return DocumentSnapshot(document, value)
