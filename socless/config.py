from __future__ import annotations

import os
from typing import Literal, Optional

import yaml
from pydantic import BaseModel

from .exceptions import ConfigurationError

_TABLE_ENV_VARS = {
    "events": "SOCLESS_EVENTS_TABLE",
    "results": "SOCLESS_RESULTS_TABLE",
    "message_responses": "SOCLESS_MESSAGE_RESPONSE_TABLE",
    "dedup": "SOCLESS_DEDUP_TABLE",
}


class TableConfig(BaseModel):
    """Names of the record store tables used by socless."""

    events: Optional[str] = None
    results: Optional[str] = None
    message_responses: Optional[str] = None
    dedup: Optional[str] = None


class VaultConfig(BaseModel):
    """Configuration for the vault blob store."""

    backend: Literal["inmemory", "local", "s3"] = "local"
    bucket: Optional[str] = None
    path: str = ".socless/vault"
    region: str = "us-east-1"


class RedisConfig(BaseModel):
    """Configuration for the Redis workflow engine adapter."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None


class EngineConfig(BaseModel):
    """Workflow engine configuration settings."""

    backend: Literal["inmemory", "redis"] = "inmemory"
    redis: RedisConfig = RedisConfig()


class SoclessConfig(BaseModel):
    """Top-level configuration model."""

    tables: TableConfig = TableConfig()
    vault: VaultConfig = VaultConfig()
    engine: EngineConfig = EngineConfig()
    database_url: Optional[str] = None
    endpoint_url: Optional[str] = None
    log_level: str = "INFO"

    def table(self, name: str) -> str:
        """Return the configured name of table ``name``.

        Raises:
            ConfigurationError: If the table has not been configured.
        """
        table_name = getattr(self.tables, name, None)
        if not table_name:
            env_var = _TABLE_ENV_VARS.get(name, name)
            raise ConfigurationError(
                f"No table configured for '{name}', set {env_var}", setting=env_var
            )
        return table_name

    def vault_bucket(self) -> str:
        if not self.vault.bucket:
            raise ConfigurationError(
                "No vault bucket configured, set SOCLESS_VAULT", setting="SOCLESS_VAULT"
            )
        return self.vault.bucket


def load_config(path: Optional[str] = None) -> SoclessConfig:
    """Load configuration from YAML file and environment.

    Args:
        path: Optional path to config file. Falls back to SOCLESS_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("SOCLESS_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = SoclessConfig(**data)
    else:
        config = SoclessConfig()

    for name, env_var in _TABLE_ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            setattr(config.tables, name, value)

    vault_bucket = os.getenv("SOCLESS_VAULT")
    if vault_bucket:
        config.vault.bucket = vault_bucket
    vault_backend = os.getenv("SOCLESS_VAULT_BACKEND")
    if vault_backend:
        config.vault = config.vault.model_copy(update={"backend": vault_backend.lower()})

    env_db_url = os.getenv("SOCLESS_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    endpoint_url = os.getenv("AWS_ENDPOINT_URL")
    if endpoint_url:
        config.endpoint_url = endpoint_url
    engine_backend = os.getenv("SOCLESS_ENGINE")
    if engine_backend:
        config.engine = config.engine.model_copy(update={"backend": engine_backend.lower()})
    log_level = os.getenv("SOCLESS_LOG_LEVEL")
    if log_level:
        config.log_level = log_level.upper()
    return config
