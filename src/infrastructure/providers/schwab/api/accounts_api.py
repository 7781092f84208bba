"""Schwab Accounts API client.

HTTP client for Schwab Trader API accounts endpoints.
Handles HTTP concerns only - returns raw JSON responses.

Endpoints:
    GET /trader/v1/accounts/accountNumbers - Account numbers and their hashes
    GET /trader/v1/accounts/{hash}?fields=positions - Balances and positions

Schwab addresses accounts by an opaque hash, never by the plain account
number.

Reference:
    - Schwab Trader API: https://developer.schwab.com
"""

from typing import Any

from src.core.constants import BEARER_PREFIX
from src.core.result import Result
from src.domain.errors import ProviderError
from src.infrastructure.providers.base_api_client import BaseProviderAPIClient
from src.infrastructure.providers.normalization import mask_ref


class SchwabAccountsAPI(BaseProviderAPIClient):
    """HTTP client for Schwab Trader API accounts endpoints.

    Example:
        >>> api = SchwabAccountsAPI(base_url="https://api.schwabapi.com", timeout=30.0)
        >>> result = await api.get_account_numbers(access_token)
    """

    def __init__(self, *, base_url: str, timeout: float) -> None:
        super().__init__(base_url=base_url, provider_name="schwab", timeout=timeout)

    def _build_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"{BEARER_PREFIX}{access_token}",
            "Accept": "application/json",
        }

    async def get_account_numbers(
        self,
        access_token: str,
    ) -> Result[list[dict[str, Any]], ProviderError]:
        """Fetch account number / hash pairs.

        Returns:
            Success(list[dict]): [{"accountNumber": "...", "hashValue": "..."}]
            Failure(ProviderError): Any HTTP or parse failure.
        """
        self._logger.debug("schwab_accounts_api_get_account_numbers_started")
        return await self._execute_and_parse_list(
            method="GET",
            path="/trader/v1/accounts/accountNumbers",
            headers=self._build_headers(access_token),
            operation="get_account_numbers",
        )

    async def get_account(
        self,
        access_token: str,
        account_hash: str,
    ) -> Result[dict[str, Any], ProviderError]:
        """Fetch one account with balances and positions.

        Returns:
            Success(dict): {"securitiesAccount": {...}}
            Failure(ProviderError): Any HTTP or parse failure.
        """
        self._logger.debug(
            "schwab_accounts_api_get_account_started",
            account_ref=mask_ref(account_hash),
        )
        return await self._execute_and_parse_object(
            method="GET",
            path=f"/trader/v1/accounts/{account_hash}",
            headers=self._build_headers(access_token),
            params={"fields": "positions"},
            operation="get_account",
        )
