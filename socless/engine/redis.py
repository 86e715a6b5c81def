"""Redis adapter that hands engine requests to a consuming worker."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..exceptions import WorkflowEngineError
from .base import WorkflowEngine, execution_arn_for

START_EXECUTION_QUEUE = "socless:start_execution"
TASK_SUCCESS_QUEUE = "socless:task_success"


class RedisWorkflowEngine(WorkflowEngine):
    """Publish engine commands onto Redis lists (acting as queues)."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self._redis: Optional[Any] = None

    async def connect(self) -> None:
        """Connect to Redis."""
        self._redis = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            decode_responses=True,
        )
        try:
            await self._redis.ping()
        except RedisError as e:
            raise WorkflowEngineError(f"Unable to reach Redis at {self.host}:{self.port}: {e}") from e

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def _push(self, queue_name: str, command: Dict[str, Any]) -> None:
        if not self._redis:
            await self.connect()
        try:
            await self._redis.lpush(queue_name, json.dumps(command))
        except RedisError as e:
            raise WorkflowEngineError(f"Failed to publish to {queue_name}: {e}") from e

    async def start_execution(
        self, name: str, state_machine_arn: str, input: Dict[str, Any]
    ) -> str:
        await self._push(
            START_EXECUTION_QUEUE,
            {"name": name, "state_machine_arn": state_machine_arn, "input": input},
        )
        return execution_arn_for(state_machine_arn, name)

    async def send_task_success(self, task_token: str, output: Dict[str, Any]) -> None:
        await self._push(TASK_SUCCESS_QUEUE, {"task_token": task_token, "output": output})
