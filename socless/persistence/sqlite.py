"""SQLite implementation of the record store."""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, Mapping

from ..exceptions import RecordNotFound, StoreError
from ..utils import apply_updates
from .inmemory import check_condition
from .repository import AttributePath, RecordStore


class SQLiteRecordStore(RecordStore):
    """Persist socless records using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(
            self.db_path, check_same_thread=False, isolation_level=None
        )
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS records (
                table_name TEXT NOT NULL,
                record_key TEXT NOT NULL,
                item TEXT NOT NULL,
                PRIMARY KEY (table_name, record_key)
            )
            """
        )

    # ------------------------------------------------------------------
    # Helper methods
    def _fetch(self, table: str, key: str) -> dict | None:
        row = self._conn.execute(
            "SELECT item FROM records WHERE table_name = ? AND record_key = ?",
            (table, key),
        ).fetchone()
        return json.loads(row["item"]) if row else None

    def _get(self, table: str, key: str) -> dict | None:
        with self._lock:
            try:
                return self._fetch(table, key)
            except sqlite3.Error as e:
                raise StoreError(f"SQLite read failed for {table}/{key}: {e}") from e

    def _put(self, table: str, key: str, item: dict) -> None:
        with self._lock:
            try:
                self._conn.execute(
                    "INSERT OR REPLACE INTO records (table_name, record_key, item) VALUES (?, ?, ?)",
                    (table, key, json.dumps(item)),
                )
            except sqlite3.Error as e:
                raise StoreError(f"SQLite write failed for {table}/{key}: {e}") from e

    def _update(
        self,
        table: str,
        key: str,
        updates: Mapping[AttributePath, Any],
        condition: Mapping[str, Any] | None,
    ) -> dict:
        with self._lock:
            try:
                self._conn.execute("BEGIN IMMEDIATE")
                try:
                    item = self._fetch(table, key)
                    if item is None:
                        raise RecordNotFound(
                            f"Key {key} not found in table {table}", table=table, key=key
                        )
                    check_condition(item, condition, table, key)
                    apply_updates(item, updates.items())
                    self._conn.execute(
                        "UPDATE records SET item = ? WHERE table_name = ? AND record_key = ?",
                        (json.dumps(item), table, key),
                    )
                except BaseException:
                    self._conn.execute("ROLLBACK")
                    raise
                self._conn.execute("COMMIT")
                return item
            except sqlite3.Error as e:
                raise StoreError(f"SQLite update failed for {table}/{key}: {e}") from e

    # ------------------------------------------------------------------
    # Store API
    async def get_item(self, table: str, key: str) -> dict | None:
        return await asyncio.to_thread(self._get, table, key)

    async def put_item(self, table: str, key: str, item: dict) -> None:
        await asyncio.to_thread(self._put, table, key, item)

    async def update_item(
        self,
        table: str,
        key: str,
        updates: Mapping[AttributePath, Any],
        condition: Mapping[str, Any] | None = None,
    ) -> dict:
        return await asyncio.to_thread(self._update, table, key, dict(updates), condition)
