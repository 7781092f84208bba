"""Common error classes used across all domains and layers.

These are generic errors that don't belong to any specific domain.
They are used throughout the application for common failure scenarios.

Error Types:
- ValidationError: Input validation failures
- NotFoundError: Resource not found
- ConflictError: Resource conflicts (sync already running, duplicates)
- ConfigurationError: Missing setup (provider settings, credentials)

Usage:
    from src.core.errors import ConfigurationError, NotFoundError
    from src.core.enums import ErrorCode
    from src.core.result import Failure

    return Failure(error=ConfigurationError(
        code=ErrorCode.CONFIGURATION_MISSING,
        message="Schwab client id is not configured",
        setting_name="schwab_api_key",
    ))
"""

from dataclasses import dataclass

from src.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        field: Field name that failed validation.
        details: Additional context.
    """

    field: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class NotFoundError(DomainError):
    """Resource not found.

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        resource_type: Type of resource (Account, Holding).
        resource_id: ID of the resource that was not found.
        details: Additional context.
    """

    resource_type: str
    resource_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictError(DomainError):
    """Resource conflict (concurrent sync, duplicate).

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        resource_type: Type of resource in conflict.
        conflicting_field: Field that has conflict (account_id, symbol, etc.).
        details: Additional context.
    """

    resource_type: str
    conflicting_field: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ConfigurationError(DomainError):
    """Required setup is missing.

    Not retryable without operator or user action. Kept distinct from
    provider authentication failures so callers can tell "not set up"
    apart from "credentials expired".

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        setting_name: Missing setting or field, when known.
        details: Additional context.
    """

    setting_name: str | None = None
