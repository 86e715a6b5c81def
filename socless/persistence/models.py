"""Data models for persisted socless records."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from ..constants import EVENT_STATUS_OPEN
from ..exceptions import StoreError
from ..utils import gen_datetimenow

RecordT = TypeVar("RecordT", bound=BaseModel)


class EventRecord(BaseModel):
    """Persisted form of an ingested event."""

    id: str
    investigation_id: str
    status: Literal["open", "closed"] = EVENT_STATUS_OPEN
    is_duplicate: bool = False
    created_at: str
    event_type: str
    playbook: str
    details: Dict[str, Any] = Field(default_factory=dict)
    data_types: Dict[str, Any] = Field(default_factory=dict)
    event_meta: Dict[str, Any] = Field(default_factory=dict)


class PlaybookArtifacts(BaseModel):
    event: EventRecord
    execution_id: str


class PlaybookInput(BaseModel):
    """Accumulated state of one playbook execution."""

    artifacts: PlaybookArtifacts
    results: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, Any] = Field(default_factory=dict)


class ExecutionRecord(BaseModel):
    """Row of the results table, keyed by ``execution_id``."""

    execution_id: str
    investigation_id: str
    datetime: str = Field(default_factory=gen_datetimenow)
    results: PlaybookInput


class HumanInteractionRecord(BaseModel):
    """Outstanding (or fulfilled) request for a human response."""

    message_id: str
    datetime: str = Field(default_factory=gen_datetimenow)
    investigation_id: str
    message: str
    fulfilled: bool = False
    execution_id: str
    receiver: str
    await_token: str
    response_payload: Optional[Any] = None


class DedupMapping(BaseModel):
    """Dedup index entry pointing a signature at its current investigation."""

    dedup_hash: str
    current_investigation_id: str


def load_record(model: Type[RecordT], item: Dict[str, Any], table: str, key: str) -> RecordT:
    """Validate a raw stored item, reporting malformed data as a store error."""
    try:
        return model.model_validate(item)
    except ValidationError as e:
        raise StoreError(
            f"Malformed {model.__name__} in table {table} for key {key}: {e}",
            details={"table": table, "key": key},
        ) from e
