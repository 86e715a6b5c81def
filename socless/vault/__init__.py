"""Vault factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import SoclessConfig, load_config
from ..exceptions import ConfigurationError
from .base import Vault
from .inmemory import InMemoryVault
from .local import LocalVault


def get_vault(backend: Optional[str] = None, config: Optional[SoclessConfig] = None) -> Vault:
    """Factory function to get the configured vault."""

    config = config or load_config()
    backend = (
        backend
        or os.getenv("SOCLESS_VAULT_BACKEND")
        or config.vault.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryVault()
    elif backend == "local":
        return LocalVault(config.vault.path, config.vault_bucket())
    elif backend == "s3":
        from .s3 import S3Vault

        return S3Vault(
            bucket=config.vault_bucket(),
            endpoint_url=config.endpoint_url,
            region=config.vault.region,
        )
    else:
        raise ConfigurationError(
            f"Unsupported vault backend: {backend}", setting="SOCLESS_VAULT_BACKEND"
        )


__all__ = ["Vault", "InMemoryVault", "LocalVault", "get_vault"]
