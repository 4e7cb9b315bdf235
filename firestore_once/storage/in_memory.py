"""In-memory document store, used for tests and single-process deployments."""

from __future__ import annotations

import asyncio
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any

from .errors import DocumentExistsError


class InMemoryStorage:
    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    async def create_document(
        self, collection: str, document_id: str, data: dict[str, Any]
    ) -> None:
        async with self._lock:
            documents = self._collections.setdefault(collection, {})
            if document_id in documents:
                raise DocumentExistsError(collection, document_id)
            document = deepcopy(dict(data))
            document.setdefault("createdAt", datetime.now(timezone.utc).isoformat())
            documents[document_id] = document

    async def get_document(self, collection: str, document_id: str) -> dict[str, Any] | None:
        async with self._lock:
            document = self._collections.get(collection, {}).get(document_id)
            return deepcopy(document) if document is not None else None

    async def list_documents(self, collection: str) -> list[dict[str, Any]]:
        async with self._lock:
            return [deepcopy(doc) for doc in self._collections.get(collection, {}).values()]

    async def delete_document(self, collection: str, document_id: str) -> None:
        async with self._lock:
            self._collections.get(collection, {}).pop(document_id, None)
