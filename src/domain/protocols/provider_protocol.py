"""Financial provider protocol (port) and provider data types.

Every provider adapter (E*TRADE, Schwab, Plaid) implements the same
capability set so the sync orchestrator never branches on provider identity:

    - linking: start_authorization / complete_authorization
    - credential lifecycle: refresh / probe / revoke
    - data: fetch_accounts / resolve_account_ref / fetch_positions
    - normalization: normalize

Data crosses the boundary in two shapes. Fetch methods return the
provider's native payload untouched (ProviderAccountList,
ProviderPositionList); normalize turns that into the canonical
NormalizedPortfolio. All methods return Result types.

Reference:
    - src/domain/errors/provider_error.py
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol, TypeAlias

from src.core.result import Result
from src.domain.enums.holding_category import HoldingCategory
from src.domain.errors import ProviderError, ProviderInvalidResponseError
from src.domain.providers.registry import ProviderAuthType
from src.domain.value_objects.provider_credentials import ProviderCredentials

ProviderAccountList: TypeAlias = list[dict[str, Any]]
"""Native account records, exactly as the provider returned them."""


# =============================================================================
# Linking Types
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class AuthorizationStart:
    """First leg of a provider linking handshake.

    Attributes:
        authorization_url: Page the user must visit (OAuth1/OAuth2).
        request_token: Short-lived OAuth1 request token.
        request_token_secret: Secret paired with request_token, kept
            server-side until the verifier comes back.
        link_token: Plaid link token for the client-side Link flow.
        expires_at: Link token expiry, when the provider reports one.
    """

    authorization_url: str | None = None
    request_token: str | None = None
    request_token_secret: str | None = None
    link_token: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True, kw_only=True)
class AuthorizationGrant:
    """Proof of user authorization returned by the linking flow.

    Attributes:
        code: OAuth1 verifier, OAuth2 authorization code or Plaid public token.
        request_token: OAuth1 request token from AuthorizationStart.
        request_token_secret: OAuth1 request token secret.
    """

    code: str
    request_token: str | None = None
    request_token_secret: str | None = None


# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class ProviderPositionList:
    """Native position payload for one remote account.

    Attributes:
        provider_account_ref: Remote account the payload belongs to.
        payload: Provider-native document(s). Shape is adapter-specific, e.g.
            E*TRADE {"balance": ..., "portfolio": ...}.
    """

    provider_account_ref: str
    payload: dict[str, Any]


@dataclass(frozen=True, kw_only=True)
class NormalizedHolding:
    """Canonical holding produced by a normalizer.

    Decimal fields are already quantized (shares 4dp, money/percent 2dp).
    """

    symbol: str
    name: str
    shares: Decimal
    current_price: Decimal
    total_value: Decimal
    category: HoldingCategory
    change_percent: Decimal = Decimal("0.00")

    def as_fields(self) -> dict[str, Any]:
        """Field values in the shape of Holding.SYNCED_FIELDS."""
        return {
            "name": self.name,
            "shares": self.shares,
            "current_price": self.current_price,
            "total_value": self.total_value,
            "category": self.category,
            "change_percent": self.change_percent,
        }


@dataclass(frozen=True, kw_only=True)
class NormalizedPortfolio:
    """Canonical view of one remote account after normalization.

    Attributes:
        provider_account_ref: Remote account identifier used for the fetch.
        balance: Total account value (2dp).
        holdings: Canonical holdings, unique by symbol.
        account_id_key: E*TRADE accountIdKey discovered during fetch.
        external_account_id: Schwab hash / Plaid account id discovered.
    """

    provider_account_ref: str
    balance: Decimal
    holdings: list[NormalizedHolding] = field(default_factory=list)
    account_id_key: str | None = None
    external_account_id: str | None = None

    def identifier_fields(self) -> dict[str, str]:
        """Provider-native identifiers to persist on the account."""
        fields: dict[str, str] = {}
        if self.account_id_key is not None:
            fields["account_id_key"] = self.account_id_key
        if self.external_account_id is not None:
            fields["external_account_id"] = self.external_account_id
        return fields


# =============================================================================
# Provider Protocol
# =============================================================================


class ProviderProtocol(Protocol):
    """Protocol (port) for financial provider adapters.

    Implementations live in src/infrastructure/providers/{slug}/ and are
    constructed by ProviderFactory from injected Settings.
    """

    @property
    def slug(self) -> str:
        """Provider slug (etrade, schwab, plaid)."""
        ...

    @property
    def auth_type(self) -> ProviderAuthType:
        """Authentication mechanism of this provider."""
        ...

    @property
    def supports_refresh(self) -> bool:
        """Whether refresh() can renew expired credentials."""
        ...

    async def start_authorization(self) -> Result[AuthorizationStart, ProviderError]:
        """Begin the linking handshake.

        Returns:
            Success(AuthorizationStart): URL and/or tokens for the user flow.
            Failure(ProviderError): Provider rejected or unreachable.
        """
        ...

    async def complete_authorization(
        self,
        grant: AuthorizationGrant,
    ) -> Result[ProviderCredentials, ProviderError]:
        """Exchange the user's grant for long-lived credentials.

        Returns:
            Success(ProviderCredentials): Credentials to persist.
            Failure(ProviderAuthenticationError): Grant rejected.
        """
        ...

    async def refresh(
        self,
        credentials: ProviderCredentials,
    ) -> Result[ProviderCredentials, ProviderError]:
        """Renew credentials using the refresh token.

        Returns:
            Success(ProviderCredentials): New pair (refresh token kept when
                the provider does not rotate it).
            Failure(ProviderAuthenticationError): Refresh token invalid, or
                the provider does not support refresh (terminal).
        """
        ...

    async def probe(self, credentials: ProviderCredentials) -> Result[None, ProviderError]:
        """Check that credentials are still accepted.

        No network call for providers whose validity is known from expiry.
        """
        ...

    async def revoke(self, credentials: ProviderCredentials) -> Result[None, ProviderError]:
        """Invalidate credentials at the provider (account removal).

        Providers without a revocation endpoint succeed without a call.
        """
        ...

    async def fetch_accounts(
        self,
        credentials: ProviderCredentials,
    ) -> Result[ProviderAccountList, ProviderError]:
        """Fetch native account records visible to the credentials."""
        ...

    def resolve_account_ref(
        self,
        raw_accounts: ProviderAccountList,
        preferred: str | None,
    ) -> Result[str, ProviderInvalidResponseError]:
        """Pick the remote account to sync.

        The stored identifier wins; otherwise the first suitable account.
        """
        ...

    async def fetch_positions(
        self,
        credentials: ProviderCredentials,
        provider_account_ref: str,
    ) -> Result[ProviderPositionList, ProviderError]:
        """Fetch native position (and balance) data for one remote account."""
        ...

    def normalize(
        self,
        raw_accounts: ProviderAccountList,
        positions: ProviderPositionList,
    ) -> Result[NormalizedPortfolio, ProviderInvalidResponseError]:
        """Map native payloads to the canonical balance and holdings.

        All-or-nothing: any unparseable required field fails the whole
        payload.
        """
        ...
