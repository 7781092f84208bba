"""Core errors package.

Exports all core-level error classes for convenient importing.

Usage:
    from src.core.errors import DomainError, NotFoundError, ConfigurationError
"""

from src.core.errors.common_errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.core.errors.domain_error import DomainError

__all__ = [
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "ValidationError",
]
