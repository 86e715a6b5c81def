"""Base interface for the external workflow engine."""

from __future__ import annotations

import abc
from typing import Any, Dict


class WorkflowEngine(metaclass=abc.ABCMeta):
    """Abstract client for the engine that runs playbook state machines."""

    async def connect(self) -> None:
        """Open connection to the engine (no-op by default)."""
        pass

    async def disconnect(self) -> None:
        """Close connection to the engine (no-op by default)."""
        pass

    @abc.abstractmethod
    async def start_execution(
        self, name: str, state_machine_arn: str, input: Dict[str, Any]
    ) -> str:
        """Start a run of ``state_machine_arn`` and return its execution arn.

        Raises:
            WorkflowEngineError: If the engine refuses or fails the request.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def send_task_success(self, task_token: str, output: Dict[str, Any]) -> None:
        """Resume the run paused on ``task_token`` with ``output``."""
        raise NotImplementedError


def execution_arn_for(state_machine_arn: str, name: str) -> str:
    """Derive the execution arn the engine assigns to run ``name``."""
    prefix, sep, machine = state_machine_arn.rpartition(":stateMachine:")
    if not sep:
        return f"{state_machine_arn}:{name}"
    return f"{prefix}:execution:{machine}:{name}"
