"""
Settlement exception hierarchy.

Every error carries enough context (node id, date range, collaborator)
for the caller to retry the whole request. The engine performs no
partial writes, so a full retry is always safe.
"""

from typing import Any


class SettlementError(Exception):
    """Base class for settlement engine errors."""

    error_code = "SETTLEMENT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})
        self.retryable = retryable

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class ConfigurationError(SettlementError):
    """Hierarchy is malformed (cycle, missing parent, level skip). Fatal."""

    error_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message, context=context, retryable=False)


class DataUnavailableError(SettlementError):
    """A collaborator lookup failed or timed out."""

    error_code = "DATA_UNAVAILABLE"

    def __init__(
        self,
        message: str,
        *,
        collaborator: str,
        context: dict[str, Any] | None = None,
    ):
        merged = {"collaborator": collaborator, **(context or {})}
        super().__init__(message, context=merged, retryable=True)
        self.collaborator = collaborator


class ValidationError(SettlementError):
    """Request input rejected before computation starts."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message, context=context, retryable=False)


class SettlementTimeoutError(SettlementError):
    """Computation exceeded the request timeout; no rows are returned."""

    error_code = "SETTLEMENT_TIMEOUT"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message, context=context, retryable=True)


class DuplicateSettlementError(SettlementError):
    """A settlement record for the same period already exists."""

    error_code = "DUPLICATE_SETTLEMENT"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message, context=context, retryable=False)
