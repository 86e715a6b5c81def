"""Workflow engine factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import SoclessConfig, load_config
from ..exceptions import ConfigurationError
from .base import WorkflowEngine
from .inmemory import InMemoryWorkflowEngine


def get_workflow_engine(
    backend: Optional[str] = None, config: Optional[SoclessConfig] = None
) -> WorkflowEngine:
    """Factory function to get the configured workflow engine client."""

    config = config or load_config()
    backend = (
        backend
        or os.getenv("SOCLESS_ENGINE")
        or config.engine.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryWorkflowEngine()
    elif backend == "redis":
        from .redis import RedisWorkflowEngine

        redis_conf = config.engine.redis
        return RedisWorkflowEngine(
            host=redis_conf.host,
            port=redis_conf.port,
            db=redis_conf.db,
            password=redis_conf.password,
        )
    else:
        raise ConfigurationError(
            f"Unsupported workflow engine backend: {backend}", setting="SOCLESS_ENGINE"
        )


__all__ = ["WorkflowEngine", "InMemoryWorkflowEngine", "get_workflow_engine"]
