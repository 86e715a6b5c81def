"""Shared fixtures: in-memory stores, configured tables and sample contexts."""

import pytest

from socless import StoreClients
from socless.config import SoclessConfig, TableConfig, VaultConfig
from socless.contracts import ExecutionContext
from socless.engine import InMemoryWorkflowEngine
from socless.persistence import InMemoryRecordStore
from socless.vault import InMemoryVault

FUNCTION_ARN = "arn:aws:lambda:us-west-2:12345678901:function:_socless_create_events"


@pytest.fixture
def config():
    """Configuration with every table set and in-memory backends."""
    return SoclessConfig(
        tables=TableConfig(
            events="socless_events",
            results="socless_results",
            message_responses="socless_message_responses",
            dedup="socless_dedup",
        ),
        vault=VaultConfig(backend="inmemory", bucket="socless-vault"),
    )


@pytest.fixture
def vault():
    return InMemoryVault(
        {
            "socless_vault_tests.txt": "this came from the vault",
        }
    )


@pytest.fixture
def clients(config, vault):
    return StoreClients(
        config,
        record_store=InMemoryRecordStore(),
        vault=vault,
        engine=InMemoryWorkflowEngine(),
    )


@pytest.fixture
def mock_root_obj():
    return ExecutionContext.model_validate(
        {
            "artifacts": {
                "event": {
                    "details": {
                        "firstname": "Sterling",
                        "middlename": "Malory",
                        "lastname": "Archer",
                        "a_map": {"jfutz": "littleboyblew"},
                        "age": 99,
                        "vault_test": "vault:socless_vault_tests.txt",
                    }
                }
            }
        }
    )


@pytest.fixture
def playbook_event():
    """Step payload as the workflow engine sends it inside a running playbook."""
    return {
        "execution_id": "98123-1234567",
        "artifacts": {
            "event": {
                "id": "1234-45678-abcd",
                "investigation_id": "1234-45678-abcd",
                "created_at": "2021-01-16T00:57:06.573112Z",
                "event_type": "mock_test_event",
                "playbook": "MockTestPlaybook",
                "details": {"firstname": "Sterling", "lastname": "Archer"},
            },
            "execution_id": "98123-1234567",
        },
        "State_Config": {
            "Name": "Authenticate_User",
            "Parameters": {
                "firstname": "$.artifacts.event.details.firstname",
                "lastname": "$.artifacts.event.details.lastname",
                "middlename": "Malory",
            },
        },
    }


@pytest.fixture
def seed_execution(clients, playbook_event):
    """Store the execution record that event ingestion would have created."""

    async def _seed(results=None, errors=None):
        artifacts = playbook_event["artifacts"]
        await clients.record_store.put_item(
            clients.table("results"),
            playbook_event["execution_id"],
            {
                "execution_id": playbook_event["execution_id"],
                "investigation_id": artifacts["event"]["investigation_id"],
                "datetime": "2021-02-02T16:19:53.032610Z",
                "results": {
                    "artifacts": artifacts,
                    "results": results or {},
                    "errors": errors or {},
                },
            },
        )

    return _seed
