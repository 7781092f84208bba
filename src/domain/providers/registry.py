"""Provider Registry - Single source of truth for provider metadata.

Catalog of every provider variant the sync layer knows about, with its
authentication style and the settings it needs.
The factory consults the registry to report missing configuration as a
ConfigurationError before any adapter is constructed.

Usage:
    from src.domain.providers.registry import get_provider_metadata

    metadata = get_provider_metadata(Provider.SCHWAB)
    if metadata and metadata.auth_type == ProviderAuthType.OAUTH2:
        ...
"""

from dataclasses import dataclass
from enum import Enum

from src.domain.enums import Provider


class ProviderCategory(str, Enum):
    """Provider categories by institution type."""

    BROKERAGE = "brokerage"
    """Direct brokerage API (E*TRADE, Schwab)."""

    AGGREGATOR = "aggregator"
    """Data aggregator fronting many institutions (Plaid)."""


class ProviderAuthType(str, Enum):
    """Provider authentication mechanism types."""

    OAUTH1 = "oauth1"
    """OAuth 1.0a with per-request HMAC-SHA1 signatures.

    Long-lived access token pair with no expiry contract; valid until a call
    is rejected. No refresh.
    """

    OAUTH2 = "oauth2"
    """OAuth 2.0 authorization-code flow with rotating refresh tokens."""

    LINK_TOKEN = "link_token"
    """Server-minted link token, client-side public token exchange.

    Long-lived opaque access token; validity probed by a health call.
    """


@dataclass(frozen=True, kw_only=True)
class ProviderMetadata:
    """Metadata for one provider variant.

    Attributes:
        provider: Provider enum member.
        display_name: Human-readable name.
        category: Institution type.
        auth_type: Authentication mechanism.
        supports_refresh: Whether expired tokens can be refreshed.
        required_settings: Settings attributes that must be non-empty.
        documentation_url: Developer documentation.
    """

    provider: Provider
    display_name: str
    category: ProviderCategory
    auth_type: ProviderAuthType
    supports_refresh: bool
    required_settings: tuple[str, ...] = ()
    documentation_url: str | None = None

    @property
    def slug(self) -> str:
        """Provider slug (enum value)."""
        return self.provider.value


PROVIDER_REGISTRY: list[ProviderMetadata] = [
    ProviderMetadata(
        provider=Provider.ETRADE,
        display_name="E*TRADE",
        category=ProviderCategory.BROKERAGE,
        auth_type=ProviderAuthType.OAUTH1,
        supports_refresh=False,
        required_settings=("etrade_consumer_key", "etrade_consumer_secret"),
        documentation_url="https://apisb.etrade.com/docs/api/account/api-account-v1.html",
    ),
    ProviderMetadata(
        provider=Provider.SCHWAB,
        display_name="Charles Schwab",
        category=ProviderCategory.BROKERAGE,
        auth_type=ProviderAuthType.OAUTH2,
        supports_refresh=True,
        required_settings=(
            "schwab_api_key",
            "schwab_api_secret",
            "schwab_redirect_uri",
        ),
        documentation_url="https://developer.schwab.com",
    ),
    ProviderMetadata(
        provider=Provider.PLAID,
        display_name="Plaid",
        category=ProviderCategory.AGGREGATOR,
        auth_type=ProviderAuthType.LINK_TOKEN,
        supports_refresh=False,
        required_settings=("plaid_client_id", "plaid_secret"),
        documentation_url="https://plaid.com/docs/api/",
    ),
]
"""Registry of all syncable providers.

Provider.MANUAL is intentionally absent: manual accounts are never synced.
"""


def get_provider_metadata(provider: Provider) -> ProviderMetadata | None:
    """Get provider metadata.

    Args:
        provider: Provider enum member.

    Returns:
        ProviderMetadata if the provider is syncable, None otherwise.
    """
    return next((p for p in PROVIDER_REGISTRY if p.provider == provider), None)


def get_syncable_providers() -> list[Provider]:
    """Get every provider that has an adapter."""
    return [p.provider for p in PROVIDER_REGISTRY]
