"""E*TRADE provider implementing ProviderProtocol.

OAuth 1.0a brokerage adapter. The access token pair has no expiry contract:
it stays valid until a call is rejected, and cannot be refreshed.

Configuration loaded from settings (src/core/config.py):
    - etrade_consumer_key / etrade_consumer_secret: OAuth consumer pair
    - etrade_sandbox: apisb.etrade.com instead of api.etrade.com
    - etrade_authorize_url: user authorization page

Architecture:
    ETradeProvider orchestrates:
    - oauth1_signer.py: HMAC-SHA1 request signatures
    - api/oauth_api.py: request/access token handshake
    - api/accounts_api.py: account list, balance, portfolio
    - mappers/: balance and positions -> NormalizedPortfolio
"""

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
from src.infrastructure.providers.etrade.api.accounts_api import ETradeAccountsAPI
from src.infrastructure.providers.etrade.api.oauth_api import ETradeOAuthAPI
from src.infrastructure.providers.etrade.mappers.account_mapper import (
    ETradeAccountMapper,
)
from src.infrastructure.providers.etrade.mappers.holding_mapper import (
    ETradeHoldingMapper,
)
from src.infrastructure.providers.etrade.oauth1_signer import OAuth1Signer
from src.infrastructure.providers.normalization import (
    PayloadError,
    collapse_duplicates,
    invalid_payload,
    mask_ref,
)

logger = structlog.get_logger(__name__)


class ETradeProvider:
    """E*TRADE provider adapter implementing ProviderProtocol.

    Example:
        >>> provider = ETradeProvider(settings=settings)
        >>> start = await provider.start_authorization()
        >>> # user visits start.value.authorization_url, returns a verifier
        >>> creds = await provider.complete_authorization(
        ...     AuthorizationGrant(
        ...         code=verifier,
        ...         request_token=start.value.request_token,
        ...         request_token_secret=start.value.request_token_secret,
        ...     )
        ... )
    """

    def __init__(self, *, settings: Settings) -> None:
        """Initialize E*TRADE provider.

        Raises:
            ValueError: If the consumer key pair is not configured.
        """
        if not settings.etrade_consumer_key:
            raise ValueError("etrade_consumer_key is required in settings")
        if not settings.etrade_consumer_secret:
            raise ValueError("etrade_consumer_secret is required in settings")

        signer = OAuth1Signer(
            consumer_key=settings.etrade_consumer_key,
            consumer_secret=settings.etrade_consumer_secret,
        )
        self._oauth_api = ETradeOAuthAPI(
            base_url=settings.etrade_api_base_url,
            authorize_url=settings.etrade_authorize_url,
            consumer_key=settings.etrade_consumer_key,
            signer=signer,
            timeout=settings.provider_timeout_seconds,
        )
        self._accounts_api = ETradeAccountsAPI(
            base_url=settings.etrade_api_base_url,
            signer=signer,
            timeout=settings.provider_timeout_seconds,
        )
        self._account_mapper = ETradeAccountMapper()
        self._holding_mapper = ETradeHoldingMapper()

    @property
    def slug(self) -> str:
        return "etrade"

    @property
    def auth_type(self) -> ProviderAuthType:
        return ProviderAuthType.OAUTH1

    @property
    def supports_refresh(self) -> bool:
        return False

    def _auth_error(self, message: str, *, expired: bool = False) -> ProviderAuthenticationError:
        return ProviderAuthenticationError(
            code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
            message=message,
            provider_name=self.slug,
            is_token_expired=expired,
        )

    # =========================================================================
    # Linking
    # =========================================================================

    async def start_authorization(self) -> Result[AuthorizationStart, ProviderError]:
        """Obtain a request token and the page where the user approves it."""
        logger.info("etrade_request_token_started", provider=self.slug)

        result = await self._oauth_api.get_request_token()
        if isinstance(result, Failure):
            return result

        request_token = result.value["oauth_token"]
        return Success(
            value=AuthorizationStart(
                authorization_url=self._oauth_api.build_authorize_url(request_token),
                request_token=request_token,
                request_token_secret=result.value["oauth_token_secret"],
            )
        )

    async def complete_authorization(
        self,
        grant: AuthorizationGrant,
    ) -> Result[ProviderCredentials, ProviderError]:
        """Exchange the verifier for the long-lived access token pair."""
        if not grant.request_token or not grant.request_token_secret:
            return Failure(
                error=self._auth_error("E*TRADE verifier requires the request token pair")
            )

        logger.info("etrade_access_token_started", provider=self.slug)

        result = await self._oauth_api.get_access_token(
            request_token=grant.request_token,
            request_token_secret=grant.request_token_secret,
            verifier=grant.code,
        )
        if isinstance(result, Failure):
            return result

        return Success(
            value=ProviderCredentials(
                access_token=result.value["oauth_token"],
                access_token_secret=result.value["oauth_token_secret"],
            )
        )

    # =========================================================================
    # Credential Lifecycle
    # =========================================================================

    async def refresh(
        self,
        credentials: ProviderCredentials,
    ) -> Result[ProviderCredentials, ProviderError]:
        """E*TRADE tokens cannot be refreshed; the user must re-authorize."""
        return Failure(
            error=self._auth_error(
                "E*TRADE access tokens cannot be refreshed, re-authorization required",
                expired=True,
            )
        )

    async def probe(self, credentials: ProviderCredentials) -> Result[None, ProviderError]:
        """Validity is only known from the next signed call; nothing to probe."""
        return Success(value=None)

    async def revoke(self, credentials: ProviderCredentials) -> Result[None, ProviderError]:
        """Revoke the access token pair."""
        if not credentials.access_token_secret:
            return Success(value=None)

        logger.info("etrade_revoke_started", provider=self.slug)
        return await self._oauth_api.revoke_access_token(
            access_token=credentials.access_token,
            access_token_secret=credentials.access_token_secret,
        )

    # =========================================================================
    # Data
    # =========================================================================

    async def fetch_accounts(
        self,
        credentials: ProviderCredentials,
    ) -> Result[ProviderAccountList, ProviderError]:
        """Fetch account records from /v1/accounts/list."""
        if not credentials.access_token_secret:
            return Failure(error=self._auth_error("E*TRADE access token secret is missing"))

        logger.info("etrade_fetch_accounts_started", provider=self.slug)

        result = await self._accounts_api.list_accounts(
            credentials.access_token, credentials.access_token_secret
        )
        if isinstance(result, Failure):
            return result

        try:
            accounts = self._account_mapper.extract_accounts(result.value)
        except (PayloadError, AttributeError) as e:
            logger.warning("etrade_account_list_invalid", provider=self.slug, error=str(e))
            return Failure(
                error=invalid_payload(
                    self.slug, f"Invalid E*TRADE account list: {e}", result.value
                )
            )

        logger.info(
            "etrade_fetch_accounts_succeeded",
            provider=self.slug,
            account_count=len(accounts),
        )
        return Success(value=accounts)

    def resolve_account_ref(
        self,
        raw_accounts: ProviderAccountList,
        preferred: str | None,
    ) -> Result[str, ProviderInvalidResponseError]:
        return self._account_mapper.resolve_account_id_key(raw_accounts, preferred)

    async def fetch_positions(
        self,
        credentials: ProviderCredentials,
        provider_account_ref: str,
    ) -> Result[ProviderPositionList, ProviderError]:
        """Fetch balance and portfolio documents of one accountIdKey."""
        if not credentials.access_token_secret:
            return Failure(error=self._auth_error("E*TRADE access token secret is missing"))

        logger.info(
            "etrade_fetch_positions_started",
            provider=self.slug,
            account_ref=mask_ref(provider_account_ref),
        )

        balance = await self._accounts_api.get_balance(
            credentials.access_token,
            credentials.access_token_secret,
            provider_account_ref,
        )
        if isinstance(balance, Failure):
            return balance

        portfolio = await self._accounts_api.get_portfolio(
            credentials.access_token,
            credentials.access_token_secret,
            provider_account_ref,
        )
        if isinstance(portfolio, Failure):
            return portfolio

        return Success(
            value=ProviderPositionList(
                provider_account_ref=provider_account_ref,
                payload={"balance": balance.value, "portfolio": portfolio.value},
            )
        )

    def normalize(
        self,
        raw_accounts: ProviderAccountList,
        positions: ProviderPositionList,
    ) -> Result[NormalizedPortfolio, ProviderInvalidResponseError]:
        """Map balance and portfolio documents to the canonical portfolio."""
        try:
            balance = self._account_mapper.map_balance(positions.payload["balance"])
            holdings = self._holding_mapper.map_portfolio(positions.payload.get("portfolio"))
        except (PayloadError, KeyError, TypeError, AttributeError) as e:
            logger.warning(
                "etrade_normalize_failed",
                provider=self.slug,
                error=str(e),
                error_type=type(e).__name__,
            )
            return Failure(
                error=invalid_payload(
                    self.slug, f"Invalid E*TRADE portfolio payload: {e}", positions.payload
                )
            )

        return Success(
            value=NormalizedPortfolio(
                provider_account_ref=positions.provider_account_ref,
                balance=balance,
                holdings=collapse_duplicates(holdings, self.slug),
                account_id_key=positions.provider_account_ref,
            )
        )
