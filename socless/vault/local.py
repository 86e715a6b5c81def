"""Vault backed by a directory on the local filesystem."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from ..exceptions import StoreError, VaultObjectNotFound
from ..utils import gen_id
from .base import Vault


class LocalVault(Vault):
    """Store vault objects as files under ``<root>/<bucket>``."""

    def __init__(self, root: str | Path, bucket: str) -> None:
        self.bucket = bucket
        self.base_path = Path(root).expanduser() / bucket

    def _object_path(self, key: str) -> Path:
        path = (self.base_path / key.lstrip("/")).resolve()
        if self.base_path.resolve() not in path.parents:
            raise VaultObjectNotFound(f"Invalid vault key: {key}", key=key)
        return path

    def _read(self, key: str) -> bytes:
        path = self._object_path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise VaultObjectNotFound(f"No object found for key: {key}", key=key)
        except OSError as e:
            raise StoreError(f"Unable to read vault object {key}: {e}") from e

    def _write(self, key: str, data: bytes) -> None:
        path = self._object_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StoreError(f"Unable to write vault object {key}: {e}") from e

    async def fetch_utf8(self, key: str) -> str:
        data = await asyncio.to_thread(self._read, key)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StoreError(f"Vault object {key} is not valid utf8") from e

    async def save(self, content: str | bytes, key: Optional[str] = None) -> str:
        key = key or gen_id()
        data = content.encode("utf-8") if isinstance(content, str) else content
        await asyncio.to_thread(self._write, key, data)
        return key
