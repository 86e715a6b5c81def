"""Invocation contracts exchanged between the workflow engine and integrations."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import DIRECT_INVOKE_STATE_NAME
from .exceptions import InvalidInvocation
from .persistence.models import EventRecord

logger = logging.getLogger(__name__)


class StateConfig(BaseModel):
    """Declaration of one playbook step: its name and declared parameters."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(alias="Name")
    parameters: Dict[str, Any] = Field(default_factory=dict, alias="Parameters")

    async def resolve_parameters(
        self, context: "ExecutionContext", vault: Any = None
    ) -> None:
        """Replace the declared parameters with their resolved values."""
        from .resolver import resolve_parameters

        self.parameters = await resolve_parameters(self.parameters, context, vault)


class ExecutionContext(BaseModel):
    """Root object that step references are evaluated against."""

    model_config = ConfigDict(extra="allow")

    execution_id: Optional[str] = None
    artifacts: Optional[Dict[str, Any]] = None
    results: Optional[Dict[str, Any]] = None
    errors: Optional[Dict[str, Any]] = None
    task_token: Optional[str] = None
    state_name: Optional[str] = None

    def to_root(self) -> Dict[str, Any]:
        """Serialized form used for path traversal."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class IntegrationInvocation(BaseModel):
    """Payload an integration step receives from the workflow engine."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    state_config: StateConfig = Field(alias="State_Config")
    testing: Optional[bool] = Field(default=None, alias="_testing")
    task_token: Optional[str] = None
    sfn_context: Optional[Dict[str, Any]] = None
    execution_id: Optional[str] = None
    artifacts: Optional[Dict[str, Any]] = None
    errors: Optional[Dict[str, Any]] = None

    @property
    def is_testing(self) -> bool:
        return bool(self.testing)

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "IntegrationInvocation":
        """Build an invocation from a raw step payload.

        Payloads carrying a ``task_token`` are rebuilt from their
        ``sfn_context``. Payloads without ``State_Config`` are treated as
        direct invocations whose whole body is the parameter mapping.
        Payloads with neither ``execution_id`` nor ``artifacts`` run in
        testing mode.
        """
        if not isinstance(event, dict):
            raise InvalidInvocation(f"Invocation payload must be a mapping, got {type(event).__name__}")

        task_token = event.get("task_token")
        if task_token:
            sfn_context = event.get("sfn_context")
            if not isinstance(sfn_context, dict):
                raise InvalidInvocation(
                    "'sfn_context' not found in invocation with a 'task_token'"
                )
            event = sfn_context

        if "State_Config" in event:
            try:
                invocation = cls.model_validate(event)
            except ValidationError as e:
                raise InvalidInvocation(f"Malformed invocation payload: {e}") from e
        elif task_token:
            raise InvalidInvocation("'sfn_context' of a paused step has no 'State_Config'")
        else:
            logger.info(
                "Event missing State_Config, building invocation in direct_invoke mode."
            )
            invocation = cls(
                state_config=StateConfig(name=DIRECT_INVOKE_STATE_NAME, parameters=dict(event))
            )

        if task_token:
            invocation.task_token = task_token
            invocation.sfn_context = None

        if invocation.execution_id is None and invocation.artifacts is None:
            logger.info(
                "No execution_id or artifacts passed to the integration, likely invoked "
                "from outside of a playbook. Running in test mode."
            )
            invocation.testing = True

        return invocation


class Event(EventRecord):
    """An event prior to persistence, still carrying its dedup selector."""

    dedup_keys: List[str] = Field(default_factory=list)

    def to_record(self) -> EventRecord:
        return EventRecord.model_validate(self.model_dump(exclude={"dedup_keys"}))


class EventBatch(BaseModel):
    """Inbound batch of events sharing one type and playbook."""

    created_at: Optional[str] = None
    event_type: str = Field(min_length=1)
    playbook: str = Field(min_length=1)
    details: List[Dict[str, Any]] = Field(default_factory=list)
    data_types: Optional[Dict[str, Any]] = None
    event_meta: Optional[Dict[str, Any]] = None
    dedup_keys: Optional[List[str]] = None


class InvocationMetadata(BaseModel):
    """Metadata of the function invocation that is ingesting events."""

    invoked_function_arn: str
    request_id: Optional[str] = None


class ExecutionStatus(BaseModel):
    """Outcome of dispatching one event to its playbook."""

    status: bool
    message: Dict[str, Any] = Field(default_factory=dict)
