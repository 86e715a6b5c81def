"""Event ingestion, deduplication and playbook dispatch."""

from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING, List

from .constants import EVENT_STATUS_CLOSED, STATE_MACHINE_ARN_TEMPLATE
from .contracts import Event, EventBatch, ExecutionStatus, InvocationMetadata
from .exceptions import InvalidInvocation, StoreError, WorkflowEngineError
from .persistence.models import (
    DedupMapping,
    EventRecord,
    ExecutionRecord,
    PlaybookArtifacts,
    PlaybookInput,
    load_record,
)
from .utils import gen_datetimenow, gen_id

if TYPE_CHECKING:
    from .clients import StoreClients

logger = logging.getLogger(__name__)


def setup_events(batch: EventBatch) -> List[Event]:
    """Expand a batch into one event per ``details`` entry."""
    created_at = batch.created_at or gen_datetimenow()
    events = []
    for details in batch.details:
        event_id = gen_id()
        events.append(
            Event(
                id=event_id,
                investigation_id=event_id,
                created_at=created_at,
                event_type=batch.event_type,
                playbook=batch.playbook,
                details=details,
                data_types=batch.data_types or {},
                event_meta=batch.event_meta or {},
                dedup_keys=batch.dedup_keys or [],
            )
        )
    return events


def build_dedup_hash(event: Event) -> str:
    """Compute the dedup signature of ``event``.

    The signature is the MD5 hex digest of the lower-cased event type followed
    by the names of the ``details`` fields listed in ``dedup_keys``, sorted
    case-insensitively and joined without separator.
    """
    dedup_names = sorted(
        (name for name in event.details if name in event.dedup_keys),
        key=str.lower,
    )
    signature = event.event_type.lower() + "".join(dedup_names)
    return hashlib.md5(signature.encode("utf-8")).hexdigest()


async def deduplicate(event: Event, clients: "StoreClients") -> Event:
    """Attach ``event`` to an open investigation sharing its signature.

    When the signature is unmapped, or maps to a missing or closed
    investigation, the event opens a new investigation and the dedup index is
    pointed at it.
    """
    dedup_hash = build_dedup_hash(event)
    store = clients.record_store
    dedup_table = clients.table("dedup")

    item = await store.get_item(dedup_table, dedup_hash)
    if item is not None:
        mapping = load_record(DedupMapping, item, dedup_table, dedup_hash)
        events_table = clients.table("events")
        existing_item = await store.get_item(events_table, mapping.current_investigation_id)
        if existing_item is None:
            logger.warning(
                f"No existing investigation found for current_investigation_id: "
                f"{mapping.current_investigation_id}"
            )
        else:
            existing = load_record(
                EventRecord, existing_item, events_table, mapping.current_investigation_id
            )
            if existing.status != EVENT_STATUS_CLOSED:
                event.status = EVENT_STATUS_CLOSED
                event.investigation_id = existing.investigation_id
                event.is_duplicate = True
                logger.info(
                    f"Event {event.id} is a duplicate of investigation {existing.investigation_id}"
                )
                return event
    else:
        logger.info(f"Unmapped dedup_hash detected in dedup table: {dedup_hash}")

    mapping = DedupMapping(dedup_hash=dedup_hash, current_investigation_id=event.investigation_id)
    await store.put_item(dedup_table, dedup_hash, mapping.model_dump())
    return event


def get_playbook_arn(playbook: str, metadata: InvocationMetadata) -> str:
    """Build the state machine arn of ``playbook`` in the caller's region and account."""
    parts = metadata.invoked_function_arn.split(":")
    if len(parts) < 5 or not parts[3] or not parts[4]:
        raise InvalidInvocation(
            f"Unable to derive region and account from {metadata.invoked_function_arn}"
        )
    return STATE_MACHINE_ARN_TEMPLATE.format(
        region=parts[3], account_id=parts[4], playbook=playbook
    )


async def execute_playbook(
    event: EventRecord, playbook_arn: str, clients: "StoreClients"
) -> ExecutionStatus:
    """Create the execution record of ``event`` and start its playbook.

    Dispatch failures are reported in the returned status instead of raised.
    """
    execution_id = gen_id()
    investigation_id = event.investigation_id
    artifacts = PlaybookArtifacts(event=event, execution_id=execution_id)
    record = ExecutionRecord(
        execution_id=execution_id,
        investigation_id=investigation_id,
        results=PlaybookInput(artifacts=artifacts),
    )

    try:
        await clients.record_store.put_item(
            clients.table("results"), execution_id, record.model_dump(mode="json")
        )
        execution_arn = await clients.engine.start_execution(
            name=execution_id,
            state_machine_arn=playbook_arn,
            input={"execution_id": execution_id, "artifacts": artifacts.model_dump(mode="json")},
        )
    except (StoreError, WorkflowEngineError) as e:
        logger.warning(f"Failed to start {playbook_arn} for event {event.id}: {e}")
        return ExecutionStatus(
            status=False,
            message={"error": f"Error during State Machine Start: {e}"},
        )

    logger.info(f"Started execution {execution_id} of {playbook_arn}")
    return ExecutionStatus(
        status=True,
        message={
            "execution_id": execution_id,
            "execution_arn": execution_arn,
            "investigation_id": investigation_id,
        },
    )


async def create_events(
    batch: EventBatch, metadata: InvocationMetadata, *, clients: "StoreClients"
) -> List[ExecutionStatus]:
    """Ingest ``batch`` and start one playbook execution per event.

    Returns:
        One status per event, in batch order.
    """
    playbook_arn = get_playbook_arn(batch.playbook, metadata)
    events_table = clients.table("events")

    records: List[EventRecord] = []
    for event in setup_events(batch):
        deduplicated = await deduplicate(event, clients)
        record = deduplicated.to_record()
        await clients.record_store.put_item(events_table, record.id, record.model_dump(mode="json"))
        records.append(record)

    return [await execute_playbook(record, playbook_arn, clients) for record in records]
