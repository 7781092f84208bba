"""Domain value objects with validation.

Immutable value objects that enforce business constraints.
"""

from src.domain.value_objects.provider_credentials import ProviderCredentials

__all__ = ["ProviderCredentials"]
