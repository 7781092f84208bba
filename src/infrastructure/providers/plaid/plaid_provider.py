"""Plaid provider implementing ProviderProtocol.

Link-token exchange aggregator. The server mints a link token, the client
runs Plaid Link and hands back a public token, and the server exchanges it
for a long-lived access token. Access tokens never expire on a schedule;
validity is probed with /item/get before each sync.

Configuration loaded from settings (src/core/config.py):
    - plaid_client_id / plaid_secret: API keys (sent in the JSON body)
    - plaid_environment: sandbox, development or production host
    - app_name: client name shown in Plaid Link
"""

from datetime import datetime

import structlog
from uuid_extensions import uuid7

from src.core.config import Settings
from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.errors import (
    ProviderAuthenticationError,
    ProviderError,
    ProviderInvalidResponseError,
)
from src.domain.protocols.provider_protocol import (
    AuthorizationGrant,
    AuthorizationStart,
    NormalizedPortfolio,
    ProviderAccountList,
    ProviderPositionList,
)
from src.domain.providers.registry import ProviderAuthType
from src.domain.value_objects.provider_credentials import ProviderCredentials
from src.infrastructure.providers.normalization import (
    PayloadError,
    collapse_duplicates,
    invalid_payload,
    mask_ref,
)
from src.infrastructure.providers.plaid.api.plaid_api import PlaidAPI
from src.infrastructure.providers.plaid.mappers.account_mapper import PlaidAccountMapper
from src.infrastructure.providers.plaid.mappers.holding_mapper import PlaidHoldingMapper

logger = structlog.get_logger(__name__)


def parse_expiration(value: object) -> datetime | None:
    """Parse Plaid's ISO-8601 expiration, None when absent or malformed."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo is not None else None


class PlaidProvider:
    """Plaid provider adapter implementing ProviderProtocol."""

    def __init__(self, *, settings: Settings) -> None:
        """Initialize Plaid provider.

        Raises:
            ValueError: If Plaid API keys are not configured.
        """
        if not settings.plaid_client_id:
            raise ValueError("plaid_client_id is required in settings")
        if not settings.plaid_secret:
            raise ValueError("plaid_secret is required in settings")

        self._client_name = settings.app_name
        self._api = PlaidAPI(
            base_url=settings.plaid_environment.base_url,
            client_id=settings.plaid_client_id,
            secret=settings.plaid_secret,
            timeout=settings.provider_timeout_seconds,
        )
        self._account_mapper = PlaidAccountMapper()
        self._holding_mapper = PlaidHoldingMapper()

    @property
    def slug(self) -> str:
        return "plaid"

    @property
    def auth_type(self) -> ProviderAuthType:
        return ProviderAuthType.LINK_TOKEN

    @property
    def supports_refresh(self) -> bool:
        return False

    # =========================================================================
    # Linking
    # =========================================================================

    async def start_authorization(self) -> Result[AuthorizationStart, ProviderError]:
        """Mint a link token for the client-side Link flow."""
        logger.info("plaid_link_token_create_started", provider=self.slug)

        result = await self._api.create_link_token(
            client_name=self._client_name,
            client_user_id=str(uuid7()),
        )
        if isinstance(result, Failure):
            return result

        link_token = result.value.get("link_token")
        if not link_token:
            return Failure(
                error=invalid_payload(self.slug, "Plaid returned no link_token", result.value)
            )

        return Success(
            value=AuthorizationStart(
                link_token=link_token,
                expires_at=parse_expiration(result.value.get("expiration")),
            )
        )

    async def complete_authorization(
        self,
        grant: AuthorizationGrant,
    ) -> Result[ProviderCredentials, ProviderError]:
        """Exchange the public token returned by Plaid Link."""
        logger.info("plaid_public_token_exchange_started", provider=self.slug)

        result = await self._api.exchange_public_token(grant.code)
        if isinstance(result, Failure):
            return result

        access_token = result.value.get("access_token")
        if not access_token:
            return Failure(
                error=invalid_payload(self.slug, "Plaid returned no access_token")
            )

        logger.info(
            "plaid_public_token_exchange_succeeded",
            provider=self.slug,
            item_id=result.value.get("item_id"),
        )
        return Success(value=ProviderCredentials(access_token=access_token))

    # =========================================================================
    # Credential Lifecycle
    # =========================================================================

    async def refresh(
        self,
        credentials: ProviderCredentials,
    ) -> Result[ProviderCredentials, ProviderError]:
        """Plaid access tokens are not refreshed; Link update mode is required."""
        return Failure(
            error=ProviderAuthenticationError(
                code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
                message="Plaid access tokens cannot be refreshed, relink required",
                provider_name=self.slug,
                is_token_expired=True,
            )
        )

    async def probe(self, credentials: ProviderCredentials) -> Result[None, ProviderError]:
        """Check item health; an item.error means the user must relink."""
        result = await self._api.get_item(credentials.access_token)
        if isinstance(result, Failure):
            return result

        item = result.value.get("item") or {}
        item_error = item.get("error")
        if item_error:
            error_code = item_error.get("error_code") if isinstance(item_error, dict) else None
            logger.warning(
                "plaid_item_error",
                provider=self.slug,
                item_id=item.get("item_id"),
                error_code=error_code,
            )
            return Failure(
                error=ProviderAuthenticationError(
                    code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
                    message=f"Plaid item requires attention: {error_code}",
                    provider_name=self.slug,
                    details={"error_code": error_code},
                    is_token_expired=error_code == "ITEM_LOGIN_REQUIRED",
                )
            )

        return Success(value=None)

    async def revoke(self, credentials: ProviderCredentials) -> Result[None, ProviderError]:
        """Remove the item, invalidating its access token."""
        logger.info("plaid_item_remove_started", provider=self.slug)

        result = await self._api.remove_item(credentials.access_token)
        if isinstance(result, Failure):
            return result
        return Success(value=None)

    # =========================================================================
    # Data
    # =========================================================================

    async def fetch_accounts(
        self,
        credentials: ProviderCredentials,
    ) -> Result[ProviderAccountList, ProviderError]:
        """Fetch the item's accounts with balances."""
        logger.info("plaid_fetch_accounts_started", provider=self.slug)

        result = await self._api.get_accounts(credentials.access_token)
        if isinstance(result, Failure):
            return result

        accounts = result.value.get("accounts")
        if not isinstance(accounts, list):
            return Failure(
                error=invalid_payload(self.slug, "Plaid accounts response has no accounts")
            )

        logger.info(
            "plaid_fetch_accounts_succeeded",
            provider=self.slug,
            account_count=len(accounts),
        )
        return Success(value=accounts)

    def resolve_account_ref(
        self,
        raw_accounts: ProviderAccountList,
        preferred: str | None,
    ) -> Result[str, ProviderInvalidResponseError]:
        return self._account_mapper.resolve_account_id(raw_accounts, preferred)

    async def fetch_positions(
        self,
        credentials: ProviderCredentials,
        provider_account_ref: str,
    ) -> Result[ProviderPositionList, ProviderError]:
        """Fetch holdings and securities of one account."""
        logger.info(
            "plaid_fetch_positions_started",
            provider=self.slug,
            account_ref=mask_ref(provider_account_ref),
        )

        result = await self._api.get_holdings(credentials.access_token, provider_account_ref)
        if isinstance(result, Failure):
            return result

        return Success(
            value=ProviderPositionList(
                provider_account_ref=provider_account_ref,
                payload=result.value,
            )
        )

    def normalize(
        self,
        raw_accounts: ProviderAccountList,
        positions: ProviderPositionList,
    ) -> Result[NormalizedPortfolio, ProviderInvalidResponseError]:
        """Map holdings joined to securities, balance from balances.current.

        The holdings response carries its own account snapshot, which is
        preferred over the earlier /accounts/get listing.
        """
        account_id = positions.provider_account_ref
        accounts = positions.payload.get("accounts") or raw_accounts

        try:
            balance = self._account_mapper.map_balance(accounts, account_id)
            holdings = self._holding_mapper.map_holdings(positions.payload, account_id)
        except (PayloadError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "plaid_normalize_failed",
                provider=self.slug,
                error=str(e),
                error_type=type(e).__name__,
            )
            return Failure(
                error=invalid_payload(
                    self.slug, f"Invalid Plaid holdings payload: {e}", positions.payload
                )
            )

        return Success(
            value=NormalizedPortfolio(
                provider_account_ref=account_id,
                balance=balance,
                holdings=collapse_duplicates(holdings, self.slug),
                external_account_id=account_id,
            )
        )
