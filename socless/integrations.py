"""Running integration handlers and persisting their results."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from .constants import LAST_SAVED_RESULTS_KEY
from .context import build_execution_context
from .contracts import IntegrationInvocation
from .exceptions import InvalidHandlerOutput, InvalidInvocation

if TYPE_CHECKING:
    from .clients import StoreClients

logger = logging.getLogger(__name__)

Handler = Callable[..., Union[Dict[str, Any], Awaitable[Dict[str, Any]]]]


async def save_state_results(
    state_name: str,
    execution_id: str,
    output: Mapping[str, Any],
    errors: Optional[Mapping[str, Any]] = None,
    *,
    clients: "StoreClients",
) -> None:
    """Save the output of a step to the execution's results.

    Sets ``results.results[state_name]`` and the last-saved-results entry, and
    ``results.errors`` when ``errors`` is non-empty, in one atomic update.

    Raises:
        RecordNotFound: If the execution record does not exist.
    """
    updates = {
        ("results", "results", state_name): dict(output),
        ("results", "results", LAST_SAVED_RESULTS_KEY): dict(output),
    }
    if errors:
        updates[("results", "errors")] = dict(errors)

    await clients.record_store.update_item(clients.table("results"), execution_id, updates)
    logger.info(f"Saved results of {state_name} for execution_id={execution_id}")


async def socless_bootstrap(
    event: Dict[str, Any],
    handler: Handler,
    *,
    clients: "StoreClients",
    include_event: bool = False,
) -> Dict[str, Any]:
    """Run ``handler`` for one step invocation.

    The invocation's execution context is built, its declared parameters are
    resolved and passed to ``handler`` as keyword arguments (plus ``context``
    when ``include_event`` is set). The handler output is saved to the
    execution results unless the invocation runs in testing mode.

    Returns:
        The handler output.
    """
    invocation = IntegrationInvocation.from_event(event)
    context = await build_execution_context(invocation, clients)

    await invocation.state_config.resolve_parameters(context, lambda: clients.vault)

    params = dict(invocation.state_config.parameters)
    if include_event:
        params["context"] = context.to_root()

    result = handler(**params)
    if inspect.isawaitable(result):
        result = await result

    if not isinstance(result, dict):
        raise InvalidHandlerOutput(
            f"Output returned from the integration handler is not a mapping: {type(result).__name__}"
        )

    if not invocation.is_testing:
        if not invocation.execution_id:
            raise InvalidInvocation("No execution_id in non-testing invocation")
        await save_state_results(
            invocation.state_config.name,
            invocation.execution_id,
            result,
            context.errors,
            clients=clients,
        )
    return result

