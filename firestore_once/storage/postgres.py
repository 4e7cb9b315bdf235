"""Postgres document store leveraging asyncpg."""

from __future__ import annotations

import asyncio
import re
from typing import Any

import asyncpg
import orjson

from .errors import DocumentExistsError

_TABLE_NAME = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")


class PostgresStorage:
    def __init__(
        self, *, dsn: str | None = None, table: str = "documents", **connect_kwargs: Any
    ) -> None:
        if not dsn and not connect_kwargs:
            raise ValueError("postgres connection details missing")
        if not _TABLE_NAME.match(table):
            raise ValueError(f"invalid postgres table name {table!r}")
        self._dsn = dsn
        self._table = table
        self._connect_kwargs = connect_kwargs
        self._pool: asyncpg.Pool | None = None
        self._pool_lock = asyncio.Lock()

    def _encode(self, payload: dict[str, Any]) -> str:
        return orjson.dumps(payload).decode()

    def _decode(self, value: Any) -> dict[str, Any]:
        if isinstance(value, (bytes, bytearray)):
            value = value.decode()
        if isinstance(value, str):
            return orjson.loads(value)
        return value

    async def _ensure_pool(self) -> asyncpg.Pool:
        if self._pool is not None:
            return self._pool
        async with self._pool_lock:
            if self._pool is not None:
                return self._pool
            pool = await asyncpg.create_pool(dsn=self._dsn, **self._connect_kwargs)
            async with pool.acquire() as conn:
                await conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {self._table} (
                        collection TEXT NOT NULL,
                        document_id TEXT NOT NULL,
                        data JSONB NOT NULL,
                        created_at TIMESTAMP DEFAULT NOW(),
                        PRIMARY KEY (collection, document_id)
                    );
                    """
                )
            self._pool = pool
        return self._pool

    async def create_document(
        self, collection: str, document_id: str, data: dict[str, Any]
    ) -> None:
        pool = await self._ensure_pool()
        async with pool.acquire() as conn:
            status = await conn.execute(
                f"""INSERT INTO {self._table}(collection, document_id, data)
                    VALUES($1, $2, $3) ON CONFLICT DO NOTHING""",
                collection,
                document_id,
                self._encode(dict(data)),
            )
        # asyncpg returns the command tag, e.g. "INSERT 0 1"
        if status.split()[-1] == "0":
            raise DocumentExistsError(collection, document_id)

    async def get_document(self, collection: str, document_id: str) -> dict[str, Any] | None:
        pool = await self._ensure_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""SELECT data FROM {self._table} WHERE collection=$1 AND document_id=$2""",
                collection,
                document_id,
            )
        if not row:
            return None
        return self._decode(row["data"])

    async def list_documents(self, collection: str) -> list[dict[str, Any]]:
        pool = await self._ensure_pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT data FROM {self._table} WHERE collection=$1 ORDER BY document_id",
                collection,
            )
        return [self._decode(row["data"]) for row in rows]

    async def delete_document(self, collection: str, document_id: str) -> None:
        pool = await self._ensure_pool()
        async with pool.acquire() as conn:
            await conn.execute(
                f"DELETE FROM {self._table} WHERE collection=$1 AND document_id=$2",
                collection,
                document_id,
            )
