"""Record store abstraction used for events, results and responses."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Tuple

AttributePath = Tuple[str, ...]


class RecordStore(Protocol):
    """Protocol for key/value record store backends.

    Items live in named tables and are addressed by a single string key.
    """

    async def get_item(self, table: str, key: str) -> dict | None:
        """Return the item stored under ``key`` or ``None``."""

    async def put_item(self, table: str, key: str, item: dict) -> None:
        """Store ``item`` under ``key``, replacing any existing item."""

    async def update_item(
        self,
        table: str,
        key: str,
        updates: Mapping[AttributePath, Any],
        condition: Mapping[str, Any] | None = None,
    ) -> dict:
        """Atomically set each attribute path of an existing item.

        Raises:
            RecordNotFound: If no item exists under ``key``.
            ConditionCheckFailed: If a top-level attribute named in
                ``condition`` does not currently hold the expected value.
        """
