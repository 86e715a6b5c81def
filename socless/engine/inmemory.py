"""In-memory workflow engine for testing and local runs."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel

from ..exceptions import WorkflowEngineError
from .base import WorkflowEngine, execution_arn_for


class StartedExecution(BaseModel):
    name: str
    state_machine_arn: str
    execution_arn: str
    input: Dict[str, Any]


class TaskSuccess(BaseModel):
    task_token: str
    output: Dict[str, Any]


class InMemoryWorkflowEngine(WorkflowEngine):
    """Record engine requests in process.

    ``fail_executions`` names runs whose start should be rejected, which lets
    tests exercise partial dispatch failures.
    """

    def __init__(self, fail_executions: Optional[Set[str]] = None) -> None:
        self.executions: List[StartedExecution] = []
        self.task_successes: List[TaskSuccess] = []
        self.fail_executions: Set[str] = set(fail_executions or ())
        self._lock = asyncio.Lock()

    async def start_execution(
        self, name: str, state_machine_arn: str, input: Dict[str, Any]
    ) -> str:
        async with self._lock:
            if name in self.fail_executions:
                raise WorkflowEngineError(f"Execution {name} rejected by engine")
            if any(e.name == name and e.state_machine_arn == state_machine_arn for e in self.executions):
                raise WorkflowEngineError(f"ExecutionAlreadyExists: {name}")
            execution_arn = execution_arn_for(state_machine_arn, name)
            self.executions.append(
                StartedExecution(
                    name=name,
                    state_machine_arn=state_machine_arn,
                    execution_arn=execution_arn,
                    input=input,
                )
            )
            return execution_arn

    async def send_task_success(self, task_token: str, output: Dict[str, Any]) -> None:
        async with self._lock:
            self.task_successes.append(TaskSuccess(task_token=task_token, output=output))
