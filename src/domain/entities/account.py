"""Account domain entity.

Represents an investment account, either maintained manually or backed by
a provider that the sync layer reconciles against.

Architecture:
    - Pure domain entity (no infrastructure dependencies)
    - Credential fields are written only by the credential manager
    - is_connected is changed only by the sync orchestrator (and by linking)

Usage:
    from uuid_extensions import uuid7
    from src.domain.entities import Account
    from src.domain.enums import AccountType, Provider

    account = Account(
        id=uuid7(),
        name="Individual Brokerage",
        provider=Provider.SCHWAB,
        account_type=AccountType.INDIVIDUAL,
    )
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from src.domain.enums.account_type import AccountType
from src.domain.enums.provider import Provider
from src.domain.value_objects.provider_credentials import ProviderCredentials


@dataclass
class Account:
    """Investment account.

    Attributes:
        id: Unique account identifier (internal).
        name: Display name.
        provider: Institution backing the account.
        account_type: Account classification.
        balance: Total account value (2dp).
        is_connected: Whether the provider link is currently usable.
        last_sync: Last time the account row was updated.
        access_token: Provider access token.
        access_token_secret: OAuth 1.0a token secret (E*TRADE).
        refresh_token: OAuth 2.0 refresh token (Schwab).
        token_expiry: Absolute access-token expiry.
        account_id_key: E*TRADE accountIdKey.
        external_account_id: Schwab account hash or Plaid account id.
        created_at: Record creation timestamp.

    Invariants:
        - access_token present after linking means is_connected is True.
        - token_expiry in the past means the access token must not be used
          before a refresh, whatever is_connected says.
    """

    id: UUID
    name: str
    provider: Provider
    account_type: AccountType
    balance: Decimal = Decimal("0.00")
    is_connected: bool = False
    last_sync: datetime | None = None
    access_token: str | None = None
    access_token_secret: str | None = None
    refresh_token: str | None = None
    token_expiry: datetime | None = None
    account_id_key: str | None = None
    external_account_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate account after initialization.

        Raises:
            ValueError: If name is empty or balance is not a Decimal.
        """
        if not self.name or not self.name.strip():
            raise ValueError("Account name cannot be empty")

        if not isinstance(self.balance, Decimal):
            raise ValueError("Account balance must be a Decimal")

    # =========================================================================
    # Query Methods
    # =========================================================================

    @property
    def credentials(self) -> ProviderCredentials | None:
        """Stored credential material, or None when the account is not linked."""
        if not self.access_token:
            return None
        return ProviderCredentials(
            access_token=self.access_token,
            access_token_secret=self.access_token_secret,
            refresh_token=self.refresh_token,
            expires_at=self.token_expiry,
        )

    @property
    def provider_account_ref(self) -> str | None:
        """Provider-native identifier used to address the remote account."""
        return self.account_id_key or self.external_account_id

    @property
    def is_syncable(self) -> bool:
        """Whether the account is backed by a provider adapter."""
        return self.provider != Provider.MANUAL

    def sync_lock_key(self) -> str:
        """Key used to serialize syncs for this account."""
        return str(self.id)
