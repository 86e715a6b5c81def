"""socless: declarative step parameters and shared execution state for security playbooks."""

from .clients import StoreClients
from .config import SoclessConfig, load_config
from .context import build_execution_context
from .contracts import (
    EventBatch,
    ExecutionContext,
    ExecutionStatus,
    IntegrationInvocation,
    InvocationMetadata,
    StateConfig,
)
from .events import create_events
from .human_interaction import end_human_interaction, init_human_interaction
from .integrations import save_state_results, socless_bootstrap
from .resolver import ReferenceResolver, resolve_parameters, resolve_reference
from .utils import gen_datetimenow, gen_id

__version__ = "0.3.0"
__all__ = [
    "EventBatch",
    "ExecutionContext",
    "ExecutionStatus",
    "IntegrationInvocation",
    "InvocationMetadata",
    "ReferenceResolver",
    "SoclessConfig",
    "StateConfig",
    "StoreClients",
    "build_execution_context",
    "create_events",
    "end_human_interaction",
    "gen_datetimenow",
    "gen_id",
    "init_human_interaction",
    "load_config",
    "resolve_parameters",
    "resolve_reference",
    "save_state_results",
    "socless_bootstrap",
]
