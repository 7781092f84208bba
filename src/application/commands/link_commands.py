"""Provider linking commands.

Linking is a two-step handshake: StartProviderLink produces whatever the
user needs to consent at the provider (authorization URL, request token or
Link token); CompleteProviderLink exchanges what the provider handed back
(verifier, authorization code or public token) for stored credentials.
"""

from dataclasses import dataclass
from uuid import UUID

from src.domain.enums import AccountType, Provider
from src.domain.protocols.provider_protocol import AuthorizationGrant


@dataclass(frozen=True, kw_only=True)
class StartProviderLink:
    """Begin the linking handshake with a provider.

    Attributes:
        provider: Provider to link.
    """

    provider: Provider


@dataclass(frozen=True, kw_only=True)
class CompleteProviderLink:
    """Finish the linking handshake and store credentials.

    Attributes:
        provider: Provider being linked.
        grant: Verifier/code/public token returned by the provider.
        account_id: Existing account to (re)link; None creates a new account.
        name: Display name for a new account.
        account_type: Classification for a new account.
    """

    provider: Provider
    grant: AuthorizationGrant
    account_id: UUID | None = None
    name: str | None = None
    account_type: AccountType = AccountType.BROKERAGE
