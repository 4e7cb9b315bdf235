"""Redis document store using the redis-py asyncio client."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson
from redis import asyncio as aioredis

from .errors import DocumentExistsError


class RedisStorage:
    def __init__(self, *, url: str, prefix: str = "firestore-once") -> None:
        if not url:
            raise ValueError("redis url missing")
        self._redis = aioredis.from_url(url)
        self._prefix = prefix.rstrip(":")

    def _document_key(self, collection: str, document_id: str) -> str:
        return f"{self._prefix}:{collection}:{document_id}"

    async def create_document(
        self, collection: str, document_id: str, data: dict[str, Any]
    ) -> None:
        document = dict(data)
        document.setdefault("createdAt", datetime.now(timezone.utc).isoformat())
        created = await self._redis.set(
            self._document_key(collection, document_id),
            orjson.dumps(document),
            nx=True,
        )
        if not created:
            raise DocumentExistsError(collection, document_id)

    async def get_document(self, collection: str, document_id: str) -> dict[str, Any] | None:
        raw = await self._redis.get(self._document_key(collection, document_id))
        if raw is None:
            return None
        return orjson.loads(raw)

    async def list_documents(self, collection: str) -> list[dict[str, Any]]:
        pattern = self._document_key(collection, "*")
        keys: list[str] = []
        cursor = 0
        while True:
            cursor, batch = await self._redis.scan(cursor=cursor, match=pattern, count=100)
            keys.extend(batch)
            if cursor == 0:
                break
        if not keys:
            return []
        values = await self._redis.mget(keys)
        return [orjson.loads(value) for value in values if value]

    async def delete_document(self, collection: str, document_id: str) -> None:
        await self._redis.delete(self._document_key(collection, document_id))
