"""Configuration helpers for firestore-once."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..validation.validator import get_schema_registry

_DEFAULT_SETTINGS = Path(__file__).resolve().parent / "settings.yaml"

DEFAULT_FIRESTORE_EVENTS_PATH = "firestore-events"
DEFAULT_TIMEOUT_MS = 1000


@dataclass(frozen=True)
class StorageConfig:
    backend: str = "in_memory"
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TriggerConfig:
    firestore_events_path: str = DEFAULT_FIRESTORE_EVENTS_PATH
    timeout_ms: int = DEFAULT_TIMEOUT_MS


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class Settings:
    storage: StorageConfig = field(default_factory=StorageConfig)
    triggers: TriggerConfig = field(default_factory=TriggerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    return yaml.safe_load(path.read_text()) or {}


def parse_settings(data: Mapping[str, Any]) -> Settings:
    get_schema_registry().validate("settings", dict(data))
    storage = data.get("storage") or {}
    triggers = data.get("triggers") or {}
    logging_section = data.get("logging") or {}
    return Settings(
        storage=StorageConfig(
            backend=str(storage.get("backend", "in_memory")),
            options=dict(storage.get("options") or {}),
        ),
        triggers=TriggerConfig(
            firestore_events_path=str(
                triggers.get("firestore_events_path", DEFAULT_FIRESTORE_EVENTS_PATH)
            ),
            timeout_ms=int(triggers.get("timeout_ms", DEFAULT_TIMEOUT_MS)),
        ),
        logging=LoggingConfig(level=str(logging_section.get("level", "INFO"))),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    path = Path(os.getenv("FIRESTORE_ONCE_CONFIG_PATH", _DEFAULT_SETTINGS))
    return parse_settings(_load_yaml(path))
