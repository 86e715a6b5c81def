"""Human interaction bridge tests."""

import pytest

from socless.context import build_execution_context
from socless.contracts import ExecutionContext, IntegrationInvocation
from socless.exceptions import (
    HumanInteractionAlreadyFulfilled,
    InvalidInvocation,
    RecordNotFound,
)
from socless.human_interaction import end_human_interaction, init_human_interaction
from socless.integrations import socless_bootstrap

EXECUTION_ID = "98123-1234567"


@pytest.fixture
def pause_step(clients, playbook_event, seed_execution):
    """Build the context of a step waiting on a task token."""

    async def _pause():
        await seed_execution(results={"Lookup_User": {"email": "archer@example.com"}})
        invocation = IntegrationInvocation.from_event(
            {"task_token": "token-123", "sfn_context": playbook_event}
        )
        return await build_execution_context(invocation, clients)

    return _pause


@pytest.mark.asyncio
async def test_init_human_interaction(clients, pause_step):
    paused_context = await pause_step()
    message_id = await init_human_interaction(
        paused_context, "Did you log in from Moscow?", clients=clients
    )

    item = await clients.record_store.get_item("socless_message_responses", message_id)
    assert len(message_id) == 36
    assert item["fulfilled"] is False
    assert item["receiver"] == "Authenticate_User"
    assert item["await_token"] == "token-123"
    assert item["execution_id"] == EXECUTION_ID
    assert item["investigation_id"] == "1234-45678-abcd"
    assert item["message"] == "Did you log in from Moscow?"


@pytest.mark.asyncio
async def test_init_human_interaction_uses_given_message_id(clients, pause_step):
    paused_context = await pause_step()
    message_id = await init_human_interaction(
        paused_context, "hello", message_id="custom-id", clients=clients
    )
    assert message_id == "custom-id"


@pytest.mark.asyncio
async def test_init_requires_paused_context(clients):
    context = ExecutionContext(
        execution_id=EXECUTION_ID,
        artifacts={"event": {"investigation_id": "1234-45678-abcd"}},
    )
    with pytest.raises(InvalidInvocation) as exc_info:
        await init_human_interaction(context, "hello", clients=clients)
    assert exc_info.value.details["missing"] == ["state_name", "task_token"]


@pytest.mark.asyncio
async def test_end_human_interaction(clients, pause_step):
    paused_context = await pause_step()
    message_id = await init_human_interaction(paused_context, "Approve?", clients=clients)
    response = {"approved": True, "responder": "lana"}

    await end_human_interaction(message_id, response, clients=clients)

    item = await clients.record_store.get_item("socless_message_responses", message_id)
    assert item["fulfilled"] is True
    assert item["response_payload"] == response

    execution = await clients.record_store.get_item("socless_results", EXECUTION_ID)
    assert execution["results"]["results"]["Authenticate_User"] == response
    assert execution["results"]["results"]["_Last_Saved_Results"] == response
    assert execution["results"]["results"]["Lookup_User"] == {"email": "archer@example.com"}

    assert len(clients.engine.task_successes) == 1
    success = clients.engine.task_successes[0]
    assert success.task_token == "token-123"
    assert success.output["results"]["Authenticate_User"] == response
    assert success.output["results"]["approved"] is True
    assert success.output["results"]["Lookup_User"] == {"email": "archer@example.com"}
    assert success.output["artifacts"]["execution_id"] == EXECUTION_ID


@pytest.mark.asyncio
async def test_end_human_interaction_twice(clients, pause_step):
    paused_context = await pause_step()
    message_id = await init_human_interaction(paused_context, "Approve?", clients=clients)

    await end_human_interaction(message_id, {"approved": True}, clients=clients)
    with pytest.raises(HumanInteractionAlreadyFulfilled):
        await end_human_interaction(message_id, {"approved": False}, clients=clients)

    assert len(clients.engine.task_successes) == 1
    item = await clients.record_store.get_item("socless_message_responses", message_id)
    assert item["response_payload"] == {"approved": True}


@pytest.mark.asyncio
async def test_end_unknown_message_id(clients):
    with pytest.raises(RecordNotFound):
        await end_human_interaction("missing", {"approved": True}, clients=clients)
    assert clients.engine.task_successes == []


@pytest.mark.asyncio
async def test_end_keeps_results_of_paused_step(clients, playbook_event, seed_execution):
    await seed_execution()

    async def ask_user(firstname, lastname, middlename, context):
        message_id = await init_human_interaction(
            ExecutionContext.model_validate(context),
            f"{firstname} {lastname}, was that you?",
            clients=clients,
        )
        return {"message_id": message_id}

    output = await socless_bootstrap(
        {"task_token": "token-123", "sfn_context": playbook_event},
        ask_user,
        clients=clients,
        include_event=True,
    )
    message_id = output["message_id"]

    await end_human_interaction(message_id, {"approved": True}, clients=clients)

    expected = {"message_id": message_id, "approved": True}
    execution = await clients.record_store.get_item("socless_results", EXECUTION_ID)
    assert execution["results"]["results"]["Authenticate_User"] == expected
    assert execution["results"]["results"]["_Last_Saved_Results"] == expected

    signaled = clients.engine.task_successes[0].output
    assert signaled["results"]["Authenticate_User"] == expected
