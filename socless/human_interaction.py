"""Pausing playbooks on a human response and resuming them when it arrives."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from .context import load_execution_record
from .contracts import ExecutionContext
from .exceptions import (
    ConditionCheckFailed,
    HumanInteractionAlreadyFulfilled,
    InvalidInvocation,
    RecordNotFound,
)
from .integrations import save_state_results
from .persistence.models import HumanInteractionRecord, load_record
from .utils import gen_id, json_merge

if TYPE_CHECKING:
    from .clients import StoreClients

logger = logging.getLogger(__name__)


async def init_human_interaction(
    context: ExecutionContext,
    message_draft: str,
    message_id: Optional[str] = None,
    *,
    clients: "StoreClients",
) -> str:
    """Record a pending human interaction for a paused step.

    Args:
        context: Execution context of the paused step; it must carry the
            task token and state name set for paused invocations.
        message_draft: The message sent to the human, kept for record keeping.
            Sending it remains the integration's job.
        message_id: Callback id to embed in the message. Generated if omitted.

    Returns:
        The message id the human's response must quote.
    """
    investigation_id = ((context.artifacts or {}).get("event") or {}).get("investigation_id")
    missing = [
        name
        for name, value in (
            ("investigation_id", investigation_id),
            ("execution_id", context.execution_id),
            ("state_name", context.state_name),
            ("task_token", context.task_token),
        )
        if not value
    ]
    if missing:
        raise InvalidInvocation(
            f"Cannot start a human interaction, context is missing: {', '.join(missing)}",
            details={"missing": missing},
        )

    message_id = message_id or gen_id()
    record = HumanInteractionRecord(
        message_id=message_id,
        investigation_id=investigation_id,
        message=message_draft,
        execution_id=context.execution_id,
        receiver=context.state_name,
        await_token=context.task_token,
    )
    await clients.record_store.put_item(
        clients.table("message_responses"), message_id, record.model_dump(mode="json")
    )
    logger.info(f"Human interaction {message_id} awaiting response for {context.state_name}")
    return message_id


async def end_human_interaction(
    message_id: str, response_body: Dict[str, Any], *, clients: "StoreClients"
) -> None:
    """Return a human's response to the playbook execution waiting on it.

    Raises:
        RecordNotFound: If ``message_id`` is unknown.
        HumanInteractionAlreadyFulfilled: If the interaction was already completed.
    """
    table = clients.table("message_responses")
    store = clients.record_store

    item = await store.get_item(table, message_id)
    if item is None:
        raise RecordNotFound(
            f"message_id {message_id} not found in table {table}", table=table, key=message_id
        )
    interaction = load_record(HumanInteractionRecord, item, table, message_id)
    if interaction.fulfilled:
        raise HumanInteractionAlreadyFulfilled(
            f"Message ID {message_id} for end_human_interaction already used",
            message_id=message_id,
        )

    execution = await load_execution_record(interaction.execution_id, clients)
    execution_results = execution.results.model_dump(mode="json")
    json_merge(execution_results["results"], {interaction.receiver: response_body})
    receiver_results = execution_results["results"][interaction.receiver]
    json_merge(execution_results["results"], dict(response_body))

    await save_state_results(
        interaction.receiver, interaction.execution_id, receiver_results, clients=clients
    )

    await clients.engine.send_task_success(interaction.await_token, execution_results)

    try:
        await store.update_item(
            table,
            message_id,
            {("fulfilled",): True, ("response_payload",): response_body},
            condition={"fulfilled": False},
        )
    except ConditionCheckFailed as e:
        raise HumanInteractionAlreadyFulfilled(
            f"Message ID {message_id} was fulfilled concurrently", message_id=message_id
        ) from e
    logger.info(f"Human interaction {message_id} fulfilled for {interaction.receiver}")
