"""Event dedup guard based on atomic create-if-absent in the document store."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..storage import DocumentExistsError, DocumentStorage
from ..validation.validator import ArgumentError

logger = logging.getLogger(__name__)


class DedupGuard:
    """Claims keys in a document store so that each key is won exactly once.

    Mutual exclusion comes from the store's atomic create only; claims may
    race from independent processes sharing the same backend.
    """

    def __init__(self, storage: DocumentStorage) -> None:
        self._storage = storage

    @property
    def storage(self) -> DocumentStorage:
        return self._storage

    async def setnx(
        self, collection_path: str, document_path: str, data: Mapping[str, Any]
    ) -> int:
        """Create the document if it does not exist.

        Returns 1 if this call created the document, 0 if it already existed.
        Any other storage failure propagates unchanged.
        """
        if not collection_path or not isinstance(collection_path, str):
            raise ArgumentError('"collection_path" is not allowed to be empty')
        if not document_path or not isinstance(document_path, str):
            raise ArgumentError('"document_path" is not allowed to be empty')
        try:
            await self._storage.create_document(collection_path, document_path, dict(data))
        except DocumentExistsError:
            logger.debug("claim conflict on %s/%s", collection_path, document_path)
            return 0
        return 1
