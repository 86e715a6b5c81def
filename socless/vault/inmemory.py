"""In-memory vault for testing."""

from __future__ import annotations

from typing import Dict, Optional

from ..exceptions import StoreError, VaultObjectNotFound
from ..utils import gen_id
from .base import Vault


class InMemoryVault(Vault):
    """Keep vault objects in a dict."""

    def __init__(self, objects: Optional[Dict[str, bytes | str]] = None) -> None:
        self._objects: Dict[str, bytes] = {}
        for key, content in (objects or {}).items():
            self._objects[key] = content.encode("utf-8") if isinstance(content, str) else content

    async def fetch_utf8(self, key: str) -> str:
        try:
            data = self._objects[key]
        except KeyError:
            raise VaultObjectNotFound(f"No object found for key: {key}", key=key)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StoreError(f"Vault object {key} is not valid utf8") from e

    async def save(self, content: str | bytes, key: Optional[str] = None) -> str:
        key = key or gen_id()
        self._objects[key] = content.encode("utf-8") if isinstance(content, str) else content
        return key
