"""Process-wide bundle of the external clients socless operations need."""

from __future__ import annotations

from typing import Optional

from .config import SoclessConfig, load_config
from .engine import WorkflowEngine, get_workflow_engine
from .persistence import RecordStore, get_record_store
from .vault import Vault, get_vault


class StoreClients:
    """Record store, vault and workflow engine clients plus configuration.

    Construct once at process start and pass to every operation. Each client
    is built on first use from ``config`` unless supplied explicitly.
    """

    def __init__(
        self,
        config: Optional[SoclessConfig] = None,
        *,
        record_store: Optional[RecordStore] = None,
        vault: Optional[Vault] = None,
        engine: Optional[WorkflowEngine] = None,
    ) -> None:
        self.config = config or load_config()
        self._record_store = record_store
        self._vault = vault
        self._engine = engine

    @property
    def record_store(self) -> RecordStore:
        if self._record_store is None:
            self._record_store = get_record_store(config=self.config)
        return self._record_store

    @property
    def vault(self) -> Vault:
        if self._vault is None:
            self._vault = get_vault(config=self.config)
        return self._vault

    @property
    def engine(self) -> WorkflowEngine:
        if self._engine is None:
            self._engine = get_workflow_engine(config=self.config)
        return self._engine

    def table(self, name: str) -> str:
        """Shortcut for :meth:`SoclessConfig.table`."""
        return self.config.table(name)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.disconnect()
