"""Document store factory."""

from __future__ import annotations

from typing import Any, Protocol

from ..config import Settings
from .errors import DocumentExistsError
from .firestore import FirestoreStorage
from .in_memory import InMemoryStorage
from .postgres import PostgresStorage
from .redis import RedisStorage

__all__ = [
    "DocumentExistsError",
    "DocumentStorage",
    "FirestoreStorage",
    "InMemoryStorage",
    "PostgresStorage",
    "RedisStorage",
    "build_storage",
]


class DocumentStorage(Protocol):
    async def create_document(
        self, collection: str, document_id: str, data: dict[str, Any]
    ) -> None:
        """Atomically create a document; raise DocumentExistsError if it exists."""
        ...

    async def get_document(self, collection: str, document_id: str) -> dict[str, Any] | None: ...

    async def list_documents(self, collection: str) -> list[dict[str, Any]]: ...

    async def delete_document(self, collection: str, document_id: str) -> None: ...


def build_storage(settings: Settings) -> DocumentStorage:
    backend = settings.storage.backend
    options = dict(settings.storage.options)
    if backend == "in_memory":
        return InMemoryStorage()
    if backend == "redis":
        return RedisStorage(**options)
    if backend == "postgres":
        return PostgresStorage(**options)
    if backend == "firestore":
        return FirestoreStorage(**options)
    raise ValueError(f"unknown storage backend {backend}")
