"""Trigger option parsing and default merging."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Awaitable, Callable, Mapping, Union

from ..validation.validator import ArgumentError, get_schema_registry

Predicate = Callable[..., Union[bool, Awaitable[bool]]]


@dataclass(frozen=True)
class TriggerOptions:
    should_handle_event: Predicate | None = None
    firestore_events_path: str | None = None
    runtime_options: Mapping[str, Any] | None = None


_OPTION_NAMES = frozenset(f.name for f in fields(TriggerOptions))


def resolve_options(
    options: TriggerOptions | Mapping[str, Any] | None,
    *,
    firestore_events_path: str,
) -> TriggerOptions:
    """Validate ``options`` and return a new TriggerOptions with defaults filled in."""
    if options is None:
        values: dict[str, Any] = {}
    elif isinstance(options, TriggerOptions):
        values = {name: getattr(options, name) for name in _OPTION_NAMES}
    elif isinstance(options, Mapping):
        unknown = sorted(set(options) - _OPTION_NAMES)
        if unknown:
            raise ArgumentError(f'"options" has unknown keys: {", ".join(map(str, unknown))}')
        values = dict(options)
    else:
        raise ArgumentError('"options" must be a mapping or TriggerOptions')

    values = {key: value for key, value in values.items() if value is not None}
    if isinstance(values.get("runtime_options"), Mapping):
        values["runtime_options"] = dict(values["runtime_options"])
    predicate = values.pop("should_handle_event", None)
    if predicate is not None and not callable(predicate):
        raise ArgumentError('"options.should_handle_event" must be callable')
    get_schema_registry().validate("trigger_options", values, label="options")

    return TriggerOptions(
        should_handle_event=predicate,
        firestore_events_path=values.get("firestore_events_path", firestore_events_path),
        runtime_options=dict(values.get("runtime_options") or {}),
    )
