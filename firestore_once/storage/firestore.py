"""Firestore document store leveraging google-cloud-firestore."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore
from google.oauth2 import service_account

from .errors import DocumentExistsError


class FirestoreStorage:
    def __init__(
        self,
        *,
        project_id: str,
        credentials_path: str | None = None,
        database: str | None = None,
    ) -> None:
        if not project_id:
            raise ValueError("project_id required for firestore backend")
        client_kwargs: dict[str, Any] = {"project": project_id}
        if credentials_path:
            client_kwargs["credentials"] = service_account.Credentials.from_service_account_file(
                credentials_path
            )
        if database:
            client_kwargs["database"] = database
        self._client = firestore.Client(**client_kwargs)

    def _document(self, collection: str, document_id: str):
        return self._client.collection(collection).document(document_id)

    async def _run(self, func: Callable, *args, **kwargs):
        return await asyncio.to_thread(func, *args, **kwargs)

    async def create_document(
        self, collection: str, document_id: str, data: dict[str, Any]
    ) -> None:
        # create() is a precondition write: it fails server-side if the document exists.
        try:
            await self._run(self._document(collection, document_id).create, dict(data))
        except gcp_exceptions.AlreadyExists as exc:
            raise DocumentExistsError(collection, document_id) from exc

    async def get_document(self, collection: str, document_id: str) -> dict[str, Any] | None:
        doc = await self._run(self._document(collection, document_id).get)
        if not doc.exists:
            return None
        return doc.to_dict()

    async def list_documents(self, collection: str) -> list[dict[str, Any]]:
        docs = await self._run(lambda: list(self._client.collection(collection).stream()))
        return [doc.to_dict() for doc in docs]

    async def delete_document(self, collection: str, document_id: str) -> None:
        await self._run(self._document(collection, document_id).delete)
