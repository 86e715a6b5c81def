"""Resolution of declared step parameters against an execution context.

A parameter value is arbitrary nested JSON. Strings inside it may be:

* ``vault:<key>``: replaced by the text content of the vault object ``key``;
* ``$.a.b.c``: replaced by the value found by walking the context key by key;
* anything else: kept as a literal.

Either reference form may carry a ``!<conversion>`` suffix. Conversions are
reserved; the suffix is stripped and otherwise ignored. Literals are kept
whole, ``!`` included.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Union

from .constants import CONVERSION_TOKEN, MAX_RESOLUTION_DEPTH, PATH_TOKEN, VAULT_TOKEN
from .contracts import ExecutionContext
from .exceptions import ConfigurationError, ReferenceResolutionError, ResolutionDepthExceeded
from .utils import split_with_delimiter

if TYPE_CHECKING:
    from .vault import Vault

logger = logging.getLogger(__name__)

ContextLike = Union[ExecutionContext, Mapping[str, Any]]
VaultSource = Union["Vault", Callable[[], "Vault"], None]


class ReferenceResolver:
    """Resolve reference values using ``vault`` for ``vault:`` indirection.

    ``vault`` may be a zero-argument callable; it is only called when a vault
    reference is actually met.
    """

    def __init__(
        self, vault: VaultSource = None, max_depth: int = MAX_RESOLUTION_DEPTH
    ) -> None:
        self.vault = vault
        self.max_depth = max_depth

    def _get_vault(self) -> Optional["Vault"]:
        if callable(self.vault):
            self.vault = self.vault()
        return self.vault

    async def resolve(self, reference: Any, context: ContextLike) -> Any:
        """Return ``reference`` with every vault and path reference resolved.

        Raises:
            ReferenceResolutionError: If a path names a key that does not exist.
            ResolutionDepthExceeded: If ``reference`` nests deeper than ``max_depth``.
        """
        root = context.to_root() if isinstance(context, ExecutionContext) else dict(context)
        return await self._resolve(reference, root, 0)

    async def _resolve(self, reference: Any, root: Dict[str, Any], depth: int) -> Any:
        if isinstance(reference, (dict, list)) and depth >= self.max_depth:
            raise ResolutionDepthExceeded(
                f"Parameter nesting exceeds maximum depth of {self.max_depth}"
            )

        if isinstance(reference, dict):
            return {
                key: await self._resolve(value, root, depth + 1)
                for key, value in reference.items()
            }
        if isinstance(reference, list):
            return [await self._resolve(item, root, depth + 1) for item in reference]
        if isinstance(reference, str):
            return await self._resolve_string(reference, root)
        return reference

    async def _resolve_string(self, reference: str, root: Dict[str, Any]) -> Any:
        if reference.startswith(VAULT_TOKEN):
            trimmed, _conversion = split_with_delimiter(reference, CONVERSION_TOKEN)
            return await self.resolve_vault_path(trimmed)
        if reference.startswith(PATH_TOKEN):
            trimmed, _conversion = split_with_delimiter(reference, CONVERSION_TOKEN)
            return await self.resolve_json_path(trimmed, root)
        return reference

    async def resolve_vault_path(self, reference: str) -> str:
        """Fetch the content of the vault object named by ``vault:<key>``."""
        vault = self._get_vault()
        if vault is None:
            raise ConfigurationError(
                f"Vault reference {reference} used but no vault is configured",
                setting="SOCLESS_VAULT",
            )
        key = reference[len(VAULT_TOKEN):]
        logger.debug(f"Fetching vault object {key}")
        return await vault.fetch_utf8(key)

    async def resolve_json_path(self, reference: str, root: Dict[str, Any]) -> Any:
        """Walk ``root`` along a ``$.``-prefixed dot path.

        Only plain mapping keys are supported; there is no indexing, filtering
        or optional chaining. Intermediate values that are themselves vault
        references are dereferenced before the walk continues.
        """
        path = reference[len(PATH_TOKEN):]
        current: Any = root
        for key in path.split("."):
            if not isinstance(current, dict) or current.get(key) is None:
                raise ReferenceResolutionError(
                    f"Unable to resolve key {key}, parent object does not exist. "
                    f"Full path: {reference}",
                    reference=reference,
                    key=key,
                )
            value = current[key]
            if isinstance(value, str) and value.startswith(VAULT_TOKEN):
                value = await self.resolve_vault_path(value)
            current = value
        return current


async def resolve_reference(
    reference: Any, context: ContextLike, vault: VaultSource = None
) -> Any:
    """Resolve a single reference value. See :class:`ReferenceResolver`."""
    return await ReferenceResolver(vault).resolve(reference, context)


async def resolve_parameters(
    parameters: Mapping[str, Any], context: ContextLike, vault: VaultSource = None
) -> Dict[str, Any]:
    """Resolve every declared parameter of a step."""
    resolver = ReferenceResolver(vault)
    return {
        name: await resolver.resolve(reference, context)
        for name, reference in parameters.items()
    }
