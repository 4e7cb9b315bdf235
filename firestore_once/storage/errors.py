"""Errors shared by the document store backends."""

from __future__ import annotations


class DocumentExistsError(Exception):
    """Raised by ``create_document`` when the target document already exists."""

    def __init__(self, collection: str, document_id: str) -> None:
        super().__init__(f"document {collection}/{document_id} already exists")
        self.collection = collection
        self.document_id = document_id
