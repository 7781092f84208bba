"""Provider domain module.

Exports provider registry and related types for use throughout the application.
"""

from src.domain.providers.registry import (
    PROVIDER_REGISTRY,
    ProviderAuthType,
    ProviderCategory,
    ProviderMetadata,
    get_provider_metadata,
    get_syncable_providers,
)

__all__ = [
    "PROVIDER_REGISTRY",
    "ProviderAuthType",
    "ProviderCategory",
    "ProviderMetadata",
    "get_provider_metadata",
    "get_syncable_providers",
]
