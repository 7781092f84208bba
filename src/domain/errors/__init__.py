"""Domain errors package.

Usage:
    from src.domain.errors import ProviderError, ProviderAuthenticationError
"""

from src.domain.errors.provider_error import (
    ProviderAuthenticationError,
    ProviderError,
    ProviderInvalidResponseError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)
from src.domain.errors.sync_error import ReconciliationError

__all__ = [
    "ProviderError",
    "ProviderAuthenticationError",
    "ProviderUnavailableError",
    "ProviderRateLimitError",
    "ProviderInvalidResponseError",
    "ReconciliationError",
]
