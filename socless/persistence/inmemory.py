"""In-memory implementation of the record store."""

from __future__ import annotations

import asyncio
import copy
from collections import defaultdict
from typing import Any, Dict, Mapping

from ..exceptions import ConditionCheckFailed, RecordNotFound
from ..utils import apply_updates
from .repository import AttributePath, RecordStore


def check_condition(
    item: Dict[str, Any], condition: Mapping[str, Any] | None, table: str, key: str
) -> None:
    for attribute, expected in (condition or {}).items():
        if item.get(attribute) != expected:
            raise ConditionCheckFailed(
                f"Condition on '{attribute}' failed for key {key} in table {table}",
                details={"table": table, "key": key, "attribute": attribute},
            )


class InMemoryRecordStore(RecordStore):
    """Store records in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[str, dict]] = defaultdict(dict)
        self._lock = asyncio.Lock()

    async def get_item(self, table: str, key: str) -> dict | None:
        item = self._tables[table].get(key)
        return copy.deepcopy(item) if item is not None else None

    async def put_item(self, table: str, key: str, item: dict) -> None:
        async with self._lock:
            self._tables[table][key] = copy.deepcopy(item)

    async def update_item(
        self,
        table: str,
        key: str,
        updates: Mapping[AttributePath, Any],
        condition: Mapping[str, Any] | None = None,
    ) -> dict:
        async with self._lock:
            current = self._tables[table].get(key)
            if current is None:
                raise RecordNotFound(
                    f"Key {key} not found in table {table}", table=table, key=key
                )
            check_condition(current, condition, table, key)
            updated = copy.deepcopy(current)
            apply_updates(updated, ((path, copy.deepcopy(v)) for path, v in updates.items()))
            self._tables[table][key] = updated
            return copy.deepcopy(updated)
