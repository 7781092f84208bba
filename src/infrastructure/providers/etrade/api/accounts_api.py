"""E*TRADE Accounts API client.

HTTP client for E*TRADE account endpoints. Every request is OAuth 1.0a
signed with the access token pair.

Endpoints:
    GET /v1/accounts/list
    GET /v1/accounts/{accountIdKey}/balance?instType=BROKERAGE&realTime=true
    GET /v1/accounts/{accountIdKey}/portfolio (204 No Content = no positions)

Reference:
    - https://apisb.etrade.com/docs/api/account/api-account-v1.html
"""

from typing import Any

from src.core.result import Failure, Result, Success
from src.domain.errors import ProviderError
from src.infrastructure.providers.base_api_client import BaseProviderAPIClient
from src.infrastructure.providers.etrade.oauth1_signer import OAuth1Signer
from src.infrastructure.providers.normalization import mask_ref


class ETradeAccountsAPI(BaseProviderAPIClient):
    """HTTP client for E*TRADE account endpoints."""

    def __init__(self, *, base_url: str, signer: OAuth1Signer, timeout: float) -> None:
        super().__init__(base_url=base_url, provider_name="etrade", timeout=timeout)
        self._signer = signer

    def _build_headers(
        self,
        path: str,
        access_token: str,
        access_token_secret: str,
        params: dict[str, str] | None,
    ) -> dict[str, str]:
        return {
            "Authorization": self._signer.authorization_header(
                "GET",
                self._url(path),
                token=access_token,
                token_secret=access_token_secret,
                query_params=params,
            ),
            "Accept": "application/json",
        }

    async def _signed_get(
        self,
        path: str,
        access_token: str,
        access_token_secret: str,
        *,
        operation: str,
        params: dict[str, str] | None = None,
    ) -> Result[dict[str, Any], ProviderError]:
        return await self._execute_and_parse_object(
            method="GET",
            path=path,
            headers=self._build_headers(path, access_token, access_token_secret, params),
            params=params,
            operation=operation,
        )

    async def list_accounts(
        self,
        access_token: str,
        access_token_secret: str,
    ) -> Result[dict[str, Any], ProviderError]:
        """Fetch the AccountListResponse document."""
        return await self._signed_get(
            "/v1/accounts/list",
            access_token,
            access_token_secret,
            operation="list_accounts",
        )

    async def get_balance(
        self,
        access_token: str,
        access_token_secret: str,
        account_id_key: str,
    ) -> Result[dict[str, Any], ProviderError]:
        """Fetch the BalanceResponse document of one account."""
        self._logger.debug(
            "etrade_accounts_api_get_balance_started",
            account_ref=mask_ref(account_id_key),
        )
        return await self._signed_get(
            f"/v1/accounts/{account_id_key}/balance",
            access_token,
            access_token_secret,
            operation="get_balance",
            params={"instType": "BROKERAGE", "realTime": "true"},
        )

    async def get_portfolio(
        self,
        access_token: str,
        access_token_secret: str,
        account_id_key: str,
    ) -> Result[dict[str, Any] | None, ProviderError]:
        """Fetch the PortfolioResponse document of one account.

        Returns:
            Success(dict): Portfolio document.
            Success(None): Account holds no positions (HTTP 204).
            Failure(ProviderError): Any HTTP or parse failure.
        """
        path = f"/v1/accounts/{account_id_key}/portfolio"
        result = await self._execute_request(
            method="GET",
            path=path,
            headers=self._build_headers(path, access_token, access_token_secret, None),
            operation="get_portfolio",
        )
        if isinstance(result, Failure):
            return result

        if result.value.status_code == 204:
            self._logger.debug(
                "etrade_portfolio_empty",
                account_ref=mask_ref(account_id_key),
            )
            return Success(value=None)

        return self._parse_json_object(result.value, "get_portfolio")
