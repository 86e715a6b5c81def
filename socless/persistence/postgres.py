"""PostgreSQL implementation of the record store."""

from __future__ import annotations

import json
from typing import Any, Mapping

import asyncpg

from ..exceptions import RecordNotFound, StoreError
from ..utils import apply_updates
from .inmemory import check_condition
from .repository import AttributePath, RecordStore


class PostgresRecordStore(RecordStore):
    """Persist socless records using PostgreSQL."""

    def __init__(self, dsn: str):
        self._dsn = dsn
        self._initialized = False

    async def _connect(self) -> asyncpg.Connection:
        try:
            conn = await asyncpg.connect(self._dsn)
            if not self._initialized:
                await self._ensure_schema(conn)
                self._initialized = True
        except (OSError, asyncpg.PostgresError) as e:
            raise StoreError(f"Unable to connect to PostgreSQL: {e}") from e
        return conn

    async def _ensure_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS records (
                table_name TEXT NOT NULL,
                record_key TEXT NOT NULL,
                item JSONB NOT NULL,
                PRIMARY KEY (table_name, record_key)
            )
            """
        )

    # ------------------------------------------------------------------
    async def get_item(self, table: str, key: str) -> dict | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                "SELECT item FROM records WHERE table_name = $1 AND record_key = $2",
                table,
                key,
            )
        except asyncpg.PostgresError as e:
            raise StoreError(f"PostgreSQL read failed for {table}/{key}: {e}") from e
        finally:
            await conn.close()
        return json.loads(row["item"]) if row else None

    async def put_item(self, table: str, key: str, item: dict) -> None:
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO records (table_name, record_key, item) VALUES ($1, $2, $3)
                ON CONFLICT (table_name, record_key) DO UPDATE SET item = EXCLUDED.item
                """,
                table,
                key,
                json.dumps(item),
            )
        except asyncpg.PostgresError as e:
            raise StoreError(f"PostgreSQL write failed for {table}/{key}: {e}") from e
        finally:
            await conn.close()

    async def update_item(
        self,
        table: str,
        key: str,
        updates: Mapping[AttributePath, Any],
        condition: Mapping[str, Any] | None = None,
    ) -> dict:
        conn = await self._connect()
        try:
            async with conn.transaction():
                row = await conn.fetchrow(
                    "SELECT item FROM records WHERE table_name = $1 AND record_key = $2 FOR UPDATE",
                    table,
                    key,
                )
                if row is None:
                    raise RecordNotFound(
                        f"Key {key} not found in table {table}", table=table, key=key
                    )
                item = json.loads(row["item"])
                check_condition(item, condition, table, key)
                apply_updates(item, updates.items())
                await conn.execute(
                    "UPDATE records SET item = $1 WHERE table_name = $2 AND record_key = $3",
                    json.dumps(item),
                    table,
                    key,
                )
        except asyncpg.PostgresError as e:
            raise StoreError(f"PostgreSQL update failed for {table}/{key}: {e}") from e
        finally:
            await conn.close()
        return item
