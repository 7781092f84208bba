"""Provider dependency factory.

The ProviderFactory resolves a Provider enum member to its adapter, reporting
unknown providers and missing settings as ConfigurationError. Adapters are
built on demand; the factory itself is an app-scoped singleton.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import get_settings

if TYPE_CHECKING:
    from src.domain.protocols.provider_factory_protocol import ProviderFactoryProtocol


@lru_cache()
def get_provider_factory() -> "ProviderFactoryProtocol":
    """Get provider factory singleton (app-scoped)."""
    from src.infrastructure.providers.provider_factory import ProviderFactory

    return ProviderFactory(settings=get_settings())
