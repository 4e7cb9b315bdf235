"""Unit tests for DedupGuard.setnx."""

from __future__ import annotations

import asyncio
import uuid
from unittest.mock import AsyncMock

import pytest

from firestore_once.events.guard import DedupGuard
from firestore_once.storage import DocumentExistsError, InMemoryStorage
from firestore_once.validation.validator import ArgumentError


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def guard(storage):
    return DedupGuard(storage)


class TestSetnx:
    collection_path = "pets"

    @pytest.mark.asyncio
    async def test_returns_one_for_each_new_document(self, guard):
        result = await asyncio.gather(
            guard.setnx(self.collection_path, str(uuid.uuid4()), {"name": "juice"}),
            guard.setnx(self.collection_path, str(uuid.uuid4()), {"name": "aric"}),
            guard.setnx(self.collection_path, str(uuid.uuid4()), {"name": "miko"}),
        )

        assert sum(result) == 3

    @pytest.mark.asyncio
    async def test_returns_zero_if_the_document_exists(self, guard):
        document_path = str(uuid.uuid4())

        result = await asyncio.gather(
            guard.setnx(self.collection_path, document_path, {"name": "juice"}),
            guard.setnx(self.collection_path, document_path, {"name": "aric"}),
            guard.setnx(self.collection_path, document_path, {"name": "miko"}),
        )

        assert sum(result) == 1
        assert sorted(result) == [0, 0, 1]

    @pytest.mark.asyncio
    async def test_many_concurrent_claims_have_one_winner(self, guard):
        document_path = str(uuid.uuid4())

        result = await asyncio.gather(
            *(guard.setnx(self.collection_path, document_path, {"n": i}) for i in range(50))
        )

        assert result.count(1) == 1
        assert result.count(0) == 49

    @pytest.mark.asyncio
    async def test_first_payload_is_kept(self, guard, storage):
        document_path = str(uuid.uuid4())

        assert await guard.setnx(self.collection_path, document_path, {"name": "juice"}) == 1
        assert await guard.setnx(self.collection_path, document_path, {"name": "aric"}) == 0

        document = await storage.get_document(self.collection_path, document_path)
        assert document["name"] == "juice"
        assert "createdAt" in document

    @pytest.mark.asyncio
    @pytest.mark.parametrize("collection_path, document_path", [("", "id"), ("pets", ""), ("pets", None)])
    async def test_rejects_empty_paths_before_touching_storage(self, collection_path, document_path):
        storage = AsyncMock()
        guard = DedupGuard(storage)

        with pytest.raises(ArgumentError):
            await guard.setnx(collection_path, document_path, {"name": "aric"})

        storage.create_document.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_storage_errors_propagate(self):
        storage = AsyncMock()
        failure = RuntimeError("deadline exceeded")
        storage.create_document.side_effect = failure
        guard = DedupGuard(storage)

        with pytest.raises(RuntimeError) as excinfo:
            await guard.setnx(self.collection_path, "doc", {"name": "aric"})

        assert excinfo.value is failure

    @pytest.mark.asyncio
    async def test_conflict_from_storage_is_not_an_error(self):
        storage = AsyncMock()
        storage.create_document.side_effect = DocumentExistsError(self.collection_path, "doc")
        guard = DedupGuard(storage)

        assert await guard.setnx(self.collection_path, "doc", {"name": "aric"}) == 0
        storage.create_document.assert_awaited_once_with(
            self.collection_path, "doc", {"name": "aric"}
        )
