"""Schwab provider implementing ProviderProtocol.

Handles the OAuth 2.0 authorization-code flow (exchange and refresh) and
Trader API calls for account balances and positions.

Configuration loaded from settings (src/core/config.py):
    - schwab_api_key: OAuth client ID
    - schwab_api_secret: OAuth client secret
    - schwab_api_base_url: API base URL
    - schwab_redirect_uri: OAuth callback URL
    - schwab_scope: Requested OAuth scope

Architecture:
    SchwabProvider orchestrates:
    - api/oauth_api.py: token endpoint client
    - api/accounts_api.py: HTTP client for accounts endpoints
    - mappers/account_mapper.py: account selection and balance
    - mappers/holding_mapper.py: positions -> NormalizedHolding

Reference:
    - Schwab Trader API: https://developer.schwab.com
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

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
from src.infrastructure.providers.schwab.api.accounts_api import SchwabAccountsAPI
from src.infrastructure.providers.schwab.api.oauth_api import SchwabOAuthAPI
from src.infrastructure.providers.schwab.mappers.account_mapper import (
    SchwabAccountMapper,
)
from src.infrastructure.providers.schwab.mappers.holding_mapper import (
    SchwabHoldingMapper,
)

logger = structlog.get_logger(__name__)


class SchwabProvider:
    """Schwab provider adapter implementing ProviderProtocol.

    Example:
        >>> provider = SchwabProvider(settings=settings)
        >>> match await provider.refresh(credentials):
        ...     case Success(value=new_credentials):
        ...         ...
        ...     case Failure(error=error):
        ...         ...
    """

    def __init__(self, *, settings: Settings) -> None:
        """Initialize Schwab provider.

        Raises:
            ValueError: If required Schwab settings are not configured.
        """
        if not settings.schwab_api_key:
            raise ValueError("schwab_api_key is required in settings")
        if not settings.schwab_api_secret:
            raise ValueError("schwab_api_secret is required in settings")
        if not settings.schwab_redirect_uri:
            raise ValueError("schwab_redirect_uri is required in settings")

        self._settings = settings
        timeout = settings.provider_timeout_seconds

        self._oauth_api = SchwabOAuthAPI(
            base_url=settings.schwab_api_base_url,
            client_id=settings.schwab_api_key,
            client_secret=settings.schwab_api_secret,
            redirect_uri=settings.schwab_redirect_uri,
            timeout=timeout,
        )
        self._accounts_api = SchwabAccountsAPI(
            base_url=settings.schwab_api_base_url,
            timeout=timeout,
        )
        self._account_mapper = SchwabAccountMapper()
        self._holding_mapper = SchwabHoldingMapper()

    @property
    def slug(self) -> str:
        """Return provider slug identifier."""
        return "schwab"

    @property
    def auth_type(self) -> ProviderAuthType:
        return ProviderAuthType.OAUTH2

    @property
    def supports_refresh(self) -> bool:
        return True

    # =========================================================================
    # Linking
    # =========================================================================

    async def start_authorization(self) -> Result[AuthorizationStart, ProviderError]:
        """Build the Schwab consent URL. No network call."""
        return Success(
            value=AuthorizationStart(
                authorization_url=self._oauth_api.build_authorization_url(
                    self._settings.schwab_scope
                )
            )
        )

    async def complete_authorization(
        self,
        grant: AuthorizationGrant,
    ) -> Result[ProviderCredentials, ProviderError]:
        """Exchange the authorization code from the OAuth callback."""
        logger.info("schwab_token_exchange_started", provider=self.slug)

        result = await self._oauth_api.exchange_code(grant.code)
        if isinstance(result, Failure):
            return result

        return self._to_credentials(result.value, "exchange", previous_refresh_token=None)

    # =========================================================================
    # Credential Lifecycle
    # =========================================================================

    async def refresh(
        self,
        credentials: ProviderCredentials,
    ) -> Result[ProviderCredentials, ProviderError]:
        """Refresh the access token.

        Schwab rotates refresh tokens on refresh. When the response omits a
        new one the current refresh token stays valid and is kept.
        """
        if not credentials.refresh_token:
            return Failure(
                error=ProviderAuthenticationError(
                    code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
                    message="No Schwab refresh token available",
                    provider_name=self.slug,
                    is_token_expired=True,
                )
            )

        logger.info("schwab_token_refresh_started", provider=self.slug)

        result = await self._oauth_api.refresh(credentials.refresh_token)
        if isinstance(result, Failure):
            return result

        return self._to_credentials(
            result.value,
            "refresh",
            previous_refresh_token=credentials.refresh_token,
        )

    async def probe(self, credentials: ProviderCredentials) -> Result[None, ProviderError]:
        """Schwab validity is known from token expiry; nothing to probe."""
        return Success(value=None)

    async def revoke(self, credentials: ProviderCredentials) -> Result[None, ProviderError]:
        """Schwab refresh tokens lapse after seven days; no revocation call."""
        return Success(value=None)

    def _to_credentials(
        self,
        data: dict[str, Any],
        operation: str,
        *,
        previous_refresh_token: str | None,
    ) -> Result[ProviderCredentials, ProviderError]:
        try:
            credentials = ProviderCredentials(
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token") or previous_refresh_token,
                expires_at=datetime.now(UTC)
                + timedelta(seconds=int(data["expires_in"])),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error(
                f"schwab_token_{operation}_missing_field",
                provider=self.slug,
                error=str(e),
            )
            return Failure(
                error=ProviderInvalidResponseError(
                    code=ErrorCode.PROVIDER_RESPONSE_INVALID,
                    message=f"Missing or invalid field in Schwab token response: {e}",
                    provider_name=self.slug,
                )
            )

        logger.info(
            f"schwab_token_{operation}_succeeded",
            provider=self.slug,
            expires_in=data.get("expires_in"),
            refresh_token_rotated=bool(data.get("refresh_token")),
        )
        return Success(value=credentials)

    # =========================================================================
    # Data
    # =========================================================================

    async def fetch_accounts(
        self,
        credentials: ProviderCredentials,
    ) -> Result[ProviderAccountList, ProviderError]:
        """Fetch account number / hash pairs."""
        logger.info("schwab_fetch_accounts_started", provider=self.slug)

        result = await self._accounts_api.get_account_numbers(credentials.access_token)
        if isinstance(result, Failure):
            return result

        logger.info(
            "schwab_fetch_accounts_succeeded",
            provider=self.slug,
            account_count=len(result.value),
        )
        return result

    def resolve_account_ref(
        self,
        raw_accounts: ProviderAccountList,
        preferred: str | None,
    ) -> Result[str, ProviderInvalidResponseError]:
        return self._account_mapper.resolve_account_hash(raw_accounts, preferred)

    async def fetch_positions(
        self,
        credentials: ProviderCredentials,
        provider_account_ref: str,
    ) -> Result[ProviderPositionList, ProviderError]:
        """Fetch balances and positions of one account hash."""
        logger.info(
            "schwab_fetch_positions_started",
            provider=self.slug,
            account_ref=mask_ref(provider_account_ref),
        )

        result = await self._accounts_api.get_account(
            credentials.access_token, provider_account_ref
        )
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
        """Map the account document to balance and holdings."""
        try:
            balance = self._account_mapper.map_balance(positions.payload)
            holdings = self._holding_mapper.map_holdings_from_account(positions.payload)
        except (PayloadError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "schwab_normalize_failed",
                provider=self.slug,
                error=str(e),
                error_type=type(e).__name__,
            )
            return Failure(
                error=invalid_payload(
                    self.slug, f"Invalid Schwab account payload: {e}", positions.payload
                )
            )

        return Success(
            value=NormalizedPortfolio(
                provider_account_ref=positions.provider_account_ref,
                balance=balance,
                holdings=collapse_duplicates(holdings, self.slug),
                external_account_id=positions.provider_account_ref,
            )
        )
