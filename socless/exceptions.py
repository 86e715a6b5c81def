"""Typed exception hierarchy for the socless runtime core."""

from __future__ import annotations

from typing import Any, Dict, Optional


class SoclessError(Exception):
    """Base exception for all socless errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(SoclessError):
    """A required setting is absent."""

    def __init__(self, message: str, setting: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.setting = setting


class ReferenceResolutionError(SoclessError):
    """A declared reference could not be resolved against the context."""

    def __init__(self, message: str, reference: str = "", key: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.reference = reference
        self.key = key


class ResolutionDepthExceeded(ReferenceResolutionError):
    """Parameter tree nests deeper than the resolver allows."""
    pass


class StoreError(SoclessError):
    """Record store or vault failure, including malformed stored records."""
    pass


class RecordNotFound(StoreError):
    """The requested item does not exist."""

    def __init__(self, message: str, table: str = "", key: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.table = table
        self.key = key


class ConditionCheckFailed(StoreError):
    """A conditional update found the item in an unexpected state."""
    pass


class VaultObjectNotFound(StoreError):
    """No vault object exists for the requested key."""

    def __init__(self, message: str, key: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.key = key


class WorkflowEngineError(SoclessError):
    """The workflow engine rejected or failed a request."""
    pass


class ContractViolation(SoclessError):
    """Caller misuse of a socless operation. Never retryable."""
    pass


class HumanInteractionAlreadyFulfilled(ContractViolation):
    """A human interaction was completed more than once."""

    def __init__(self, message: str, message_id: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.message_id = message_id


class InvalidInvocation(ContractViolation):
    """An invocation payload or context lacks required fields."""
    pass


class InvalidHandlerOutput(ContractViolation):
    """An integration handler returned something other than a mapping."""
    pass
