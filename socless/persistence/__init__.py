"""Persistence layer for socless records."""

from __future__ import annotations

import os
from typing import Optional

from ..config import SoclessConfig, load_config
from ..exceptions import ConfigurationError
from .inmemory import InMemoryRecordStore
from .models import (
    DedupMapping,
    EventRecord,
    ExecutionRecord,
    HumanInteractionRecord,
    PlaybookArtifacts,
    PlaybookInput,
    load_record,
)
from .repository import AttributePath, RecordStore
from .sqlite import SQLiteRecordStore


def get_record_store(
    database_url: Optional[str] = None, config: Optional[SoclessConfig] = None
) -> RecordStore:
    """Factory function to obtain a record store.

    The backend is selected based on ``database_url`` which can be provided
    explicitly, via environment variable ``SOCLESS_DATABASE_URL`` or
    ``DATABASE_URL``, or from loaded configuration. When no database is
    configured, an in-memory store is returned.
    """

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("SOCLESS_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or config.database_url
    )

    if not database_url:
        return InMemoryRecordStore()

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        return SQLiteRecordStore(path)
    elif database_url.startswith("postgres://") or database_url.startswith(
        "postgresql://"
    ):
        from .postgres import PostgresRecordStore

        return PostgresRecordStore(database_url)
    else:
        raise ConfigurationError(
            f"Unsupported database backend: {database_url}", setting="database_url"
        )


__all__ = [
    "AttributePath",
    "DedupMapping",
    "EventRecord",
    "ExecutionRecord",
    "HumanInteractionRecord",
    "InMemoryRecordStore",
    "PlaybookArtifacts",
    "PlaybookInput",
    "RecordStore",
    "SQLiteRecordStore",
    "get_record_store",
    "load_record",
]
