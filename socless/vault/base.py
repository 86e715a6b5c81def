"""Base interface for the socless vault blob store."""

from __future__ import annotations

import abc
from typing import Optional


class Vault(metaclass=abc.ABCMeta):
    """Abstract blob store holding large payloads referenced as ``vault:<key>``."""

    @abc.abstractmethod
    async def fetch_utf8(self, key: str) -> str:
        """Return the full text content of the object named ``key``.

        Raises:
            VaultObjectNotFound: If no object exists for ``key``.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def save(self, content: str | bytes, key: Optional[str] = None) -> str:
        """Store ``content`` and return the key it was saved under."""
        raise NotImplementedError
