"""Construction of the execution context a step's references resolve against."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .contracts import ExecutionContext, IntegrationInvocation
from .exceptions import InvalidInvocation, RecordNotFound
from .persistence.models import ExecutionRecord, load_record
from .utils import json_merge

if TYPE_CHECKING:
    from .clients import StoreClients

logger = logging.getLogger(__name__)


async def load_execution_record(execution_id: str, clients: "StoreClients") -> ExecutionRecord:
    """Load the results table row of ``execution_id``.

    Raises:
        RecordNotFound: If the execution was never created.
    """
    table = clients.table("results")
    item = await clients.record_store.get_item(table, execution_id)
    if item is None:
        raise RecordNotFound(
            f"Execution ID {execution_id} not found in results table {table}",
            table=table,
            key=execution_id,
        )
    return load_record(ExecutionRecord, item, table, execution_id)


async def build_execution_context(
    invocation: IntegrationInvocation, clients: "StoreClients"
) -> ExecutionContext:
    """Build the context for one step invocation.

    Testing invocations are their own context. Otherwise the persisted
    execution results are loaded and overlaid with the invocation's
    ``execution_id``, forwarded ``errors`` and, for paused steps, the
    ``task_token`` and ``state_name``.
    """
    if invocation.is_testing:
        return ExecutionContext.model_validate(
            invocation.model_dump(mode="json", by_alias=True, exclude_none=True)
        )

    execution_id = invocation.execution_id
    if not execution_id:
        raise InvalidInvocation("No execution_id in a non-testing invocation")

    record = await load_execution_record(execution_id, clients)
    context = record.results.model_dump(mode="json")

    overlay = {"execution_id": execution_id}
    if invocation.errors is not None:
        overlay["errors"] = invocation.errors
    json_merge(context, overlay)

    if invocation.task_token:
        json_merge(
            context,
            {
                "task_token": invocation.task_token,
                "state_name": invocation.state_config.name,
            },
        )

    logger.debug(f"Built execution context for execution_id={execution_id}")
    return ExecutionContext.model_validate(context)
