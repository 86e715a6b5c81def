import asyncio
import json

from typer.testing import CliRunner

from socless.cli import app
from socless.engine import InMemoryWorkflowEngine
from socless.exceptions import WorkflowEngineError

FUNCTION_ARN = "arn:aws:lambda:us-west-2:12345678901:function:_socless_create_events"

runner = CliRunner()


def test_events_create_starts_playbooks(clients):
    batch = {
        "event_type": "Suspicious Login",
        "playbook": "InvestigateLogin",
        "details": [{"username": "sterling"}, {"username": "lana"}],
    }

    result = runner.invoke(
        app, ["events", "create", json.dumps(batch), "--function-arn", FUNCTION_ARN], obj=clients
    )

    assert result.exit_code == 0, result.output
    assert result.output.count("OK\t") == 2
    assert len(clients.engine.executions) == 2
    assert clients.engine.executions[0].state_machine_arn == (
        "arn:aws:states:us-west-2:12345678901:stateMachine:InvestigateLogin"
    )


def test_events_create_from_file(clients, tmp_path):
    batch_file = tmp_path / "batch.json"
    batch_file.write_text(
        json.dumps({"event_type": "Phish", "playbook": "TriagePhish", "details": [{}]})
    )

    result = runner.invoke(
        app, ["events", "create", str(batch_file), "--function-arn", FUNCTION_ARN], obj=clients
    )

    assert result.exit_code == 0, result.output
    assert len(clients.engine.executions) == 1


class RejectingEngine(InMemoryWorkflowEngine):
    async def start_execution(self, name, state_machine_arn, input):
        raise WorkflowEngineError("ExecutionLimitExceeded")


def test_events_create_reports_failures(clients):
    clients._engine = RejectingEngine()
    batch = {"event_type": "Phish", "playbook": "TriagePhish", "details": [{}]}

    result = runner.invoke(
        app, ["events", "create", json.dumps(batch), "--function-arn", FUNCTION_ARN], obj=clients
    )

    assert result.exit_code == 1
    assert "FAILED\t" in result.output
    assert "Error during State Machine Start" in result.output


def test_events_create_rejects_invalid_batch(clients):
    result = runner.invoke(
        app,
        ["events", "create", json.dumps({"details": []}), "--function-arn", FUNCTION_ARN],
        obj=clients,
    )
    assert result.exit_code == 1
    assert "Invalid event batch" in result.output


def test_execution_show(clients, seed_execution):
    asyncio.run(seed_execution(results={"Step_A": {"x": 1}}))

    result = runner.invoke(app, ["execution", "show", "98123-1234567"], obj=clients)
    assert result.exit_code == 0, result.output
    shown = json.loads(result.output)
    assert shown["execution_id"] == "98123-1234567"
    assert shown["results"]["results"] == {"Step_A": {"x": 1}}

    result_missing = runner.invoke(app, ["execution", "show", "missing-id"], obj=clients)
    assert result_missing.exit_code == 1
    assert "missing-id" in result_missing.output


def test_vault_put_and_get(clients, tmp_path):
    secret = tmp_path / "secret.txt"
    secret.write_text("hunter2")

    result = runner.invoke(app, ["vault", "put", str(secret), "--key", "creds.txt"], obj=clients)
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "vault:creds.txt"

    result = runner.invoke(app, ["vault", "get", "creds.txt"], obj=clients)
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "hunter2"

    result = runner.invoke(app, ["vault", "get", "missing.txt"], obj=clients)
    assert result.exit_code == 1


def test_vault_put_missing_file(clients, tmp_path):
    result = runner.invoke(app, ["vault", "put", str(tmp_path / "nope.txt")], obj=clients)
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_interaction_complete(clients, seed_execution):
    asyncio.run(seed_execution())
    asyncio.run(
        clients.record_store.put_item(
            "socless_message_responses",
            "msg-1",
            {
                "message_id": "msg-1",
                "datetime": "2021-02-02T16:19:53.032610Z",
                "investigation_id": "1234-45678-abcd",
                "message": "Approve?",
                "fulfilled": False,
                "execution_id": "98123-1234567",
                "receiver": "Await_Approval",
                "await_token": "token-123",
            },
        )
    )

    result = runner.invoke(
        app, ["interaction", "complete", "msg-1", '{"approved": true}'], obj=clients
    )
    assert result.exit_code == 0, result.output
    assert clients.engine.task_successes[0].task_token == "token-123"

    result = runner.invoke(
        app, ["interaction", "complete", "msg-1", '{"approved": true}'], obj=clients
    )
    assert result.exit_code == 1
    assert len(clients.engine.task_successes) == 1


def test_interaction_complete_requires_object(clients):
    result = runner.invoke(app, ["interaction", "complete", "msg-1", "[1, 2]"], obj=clients)
    assert result.exit_code == 1
    assert "JSON object" in result.output


class ClosingEngine(InMemoryWorkflowEngine):
    def __init__(self):
        super().__init__()
        self.disconnects = 0

    async def disconnect(self):
        self.disconnects += 1


def test_commands_close_clients(clients):
    engine = ClosingEngine()
    clients._engine = engine
    batch = {"event_type": "Phish", "playbook": "TriagePhish", "details": [{}]}

    result = runner.invoke(
        app, ["events", "create", json.dumps(batch), "--function-arn", FUNCTION_ARN], obj=clients
    )
    assert result.exit_code == 0, result.output
    assert engine.disconnects == 1

    result = runner.invoke(app, ["execution", "show", "missing-id"], obj=clients)
    assert result.exit_code == 1
    assert engine.disconnects == 2
