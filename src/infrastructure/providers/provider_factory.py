"""Provider Factory Implementation.

Concrete implementation of ProviderFactoryProtocol that resolves provider
adapters at runtime from the account's Provider. Configuration is validated
against the registry before any adapter is constructed, so a missing key is
reported as a ConfigurationError instead of an authentication failure.

Architecture:
- Infrastructure layer implementation
- Implements ProviderFactoryProtocol from domain
- Settings injected at construction (app-scoped singleton via container)
"""

from src.core.config import Settings
from src.core.enums import ErrorCode
from src.core.errors import ConfigurationError
from src.core.result import Failure, Result, Success
from src.domain.enums.provider import Provider
from src.domain.protocols.provider_protocol import ProviderProtocol
from src.domain.providers.registry import PROVIDER_REGISTRY, get_provider_metadata


class ProviderFactory:
    """Concrete provider factory implementation.

    Example:
        >>> factory = ProviderFactory(settings=settings)
        >>> match factory.get_provider(Provider.SCHWAB):
        ...     case Success(value=provider):
        ...         result = await provider.fetch_accounts(credentials)
        ...     case Failure(error=error):
        ...         ...
    """

    def __init__(self, *, settings: Settings) -> None:
        self._settings = settings

    def _missing_settings(self, provider: Provider) -> list[str]:
        metadata = get_provider_metadata(provider)
        if metadata is None:
            return []
        return [
            name
            for name in metadata.required_settings
            if not getattr(self._settings, name, None)
        ]

    def get_provider(
        self,
        provider: Provider,
    ) -> Result[ProviderProtocol, ConfigurationError]:
        """Get provider adapter.

        Returns:
            Success(ProviderProtocol): Configured adapter.
            Failure(ConfigurationError): Provider has no adapter or is not
                configured.
        """
        metadata = get_provider_metadata(provider)
        if metadata is None:
            supported = ", ".join(p.slug for p in PROVIDER_REGISTRY)
            return Failure(
                error=ConfigurationError(
                    code=ErrorCode.PROVIDER_NOT_SUPPORTED,
                    message=f"Provider '{provider.value}' cannot be synced. Supported: {supported}",
                )
            )

        missing = self._missing_settings(provider)
        if missing:
            return Failure(
                error=ConfigurationError(
                    code=ErrorCode.CONFIGURATION_MISSING,
                    message=(
                        f"Provider '{metadata.slug}' not configured. "
                        f"Required settings: {', '.join(metadata.required_settings)}"
                    ),
                    setting_name=missing[0],
                    details={"missing": ", ".join(missing)},
                )
            )

        # Lazy import and instantiate (avoid circular imports)
        match provider:
            case Provider.ETRADE:
                from src.infrastructure.providers.etrade import ETradeProvider

                return Success(value=ETradeProvider(settings=self._settings))

            case Provider.SCHWAB:
                from src.infrastructure.providers.schwab import SchwabProvider

                return Success(value=SchwabProvider(settings=self._settings))

            case Provider.PLAID:
                from src.infrastructure.providers.plaid import PlaidProvider

                return Success(value=PlaidProvider(settings=self._settings))

            case _:
                return Failure(
                    error=ConfigurationError(
                        code=ErrorCode.PROVIDER_NOT_SUPPORTED,
                        message=(
                            f"Provider '{provider.value}' in registry but no factory "
                            "defined. This is a bug - please report to maintainers."
                        ),
                    )
                )
