"""Plaid API client.

HTTP client for the Plaid endpoints used by the investments sync. Every call
is a JSON POST with client_id and secret in the body.

Endpoints:
    POST /link/token/create            - Link token for the client-side flow
    POST /item/public_token/exchange   - Public token -> access token
    POST /item/get                     - Item health (item.error)
    POST /accounts/get                 - Accounts with balances
    POST /investments/holdings/get     - Holdings joined with securities
    POST /item/remove                  - Revoke the access token

Plaid reports failures as JSON bodies with error_type / error_code; those
take precedence over the HTTP status when mapping to ProviderError.

Reference:
    - https://plaid.com/docs/api/
    - https://plaid.com/docs/errors/
"""

from typing import Any

import httpx

from src.core.constants import RESPONSE_BODY_MAX_LENGTH
from src.core.enums import ErrorCode
from src.core.result import Failure, Result
from src.domain.errors import (
    ProviderAuthenticationError,
    ProviderError,
    ProviderInvalidResponseError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)
from src.infrastructure.providers.base_api_client import (
    SUCCESS_STATUSES,
    BaseProviderAPIClient,
    parse_retry_after,
)

AUTH_ERROR_TYPES: frozenset[str] = frozenset({"ITEM_ERROR"})
AUTH_ERROR_CODES: frozenset[str] = frozenset({"INVALID_ACCESS_TOKEN"})
TRANSIENT_ERROR_TYPES: frozenset[str] = frozenset({"API_ERROR", "INSTITUTION_ERROR"})


def map_plaid_error(body: dict[str, Any], response: httpx.Response) -> ProviderError:
    """Translate a Plaid error body into a ProviderError."""
    error_type = str(body.get("error_type") or "")
    error_code = str(body.get("error_code") or "")
    message = str(body.get("error_message") or body.get("display_message") or error_code)
    details = {"error_type": error_type, "error_code": error_code}

    if error_type in AUTH_ERROR_TYPES or error_code in AUTH_ERROR_CODES:
        return ProviderAuthenticationError(
            code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
            message=f"Plaid authentication failed: {message}",
            provider_name="plaid",
            details=details,
            is_token_expired=error_code == "ITEM_LOGIN_REQUIRED",
        )

    if error_type == "RATE_LIMIT_EXCEEDED":
        return ProviderRateLimitError(
            code=ErrorCode.PROVIDER_RATE_LIMITED,
            message=f"Plaid rate limit exceeded: {message}",
            provider_name="plaid",
            details=details,
            retry_after=parse_retry_after(response.headers.get("Retry-After")),
        )

    if error_type in TRANSIENT_ERROR_TYPES:
        return ProviderUnavailableError(
            code=ErrorCode.PROVIDER_UNAVAILABLE,
            message=f"Plaid is unavailable: {message}",
            provider_name="plaid",
            details=details,
        )

    return ProviderInvalidResponseError(
        code=ErrorCode.PROVIDER_RESPONSE_INVALID,
        message=f"Plaid request failed: {message}",
        provider_name="plaid",
        details=details,
        response_body=response.text[:RESPONSE_BODY_MAX_LENGTH],
    )


class PlaidAPI(BaseProviderAPIClient):
    """HTTP client for Plaid.

    Example:
        >>> api = PlaidAPI(
        ...     base_url="https://sandbox.plaid.com",
        ...     client_id="...",
        ...     secret="...",
        ...     timeout=30.0,
        ... )
        >>> result = await api.get_accounts(access_token)
    """

    def __init__(
        self,
        *,
        base_url: str,
        client_id: str,
        secret: str,
        timeout: float,
    ) -> None:
        super().__init__(base_url=base_url, provider_name="plaid", timeout=timeout)
        self._client_id = client_id
        self._secret = secret

    async def _post(
        self,
        path: str,
        body: dict[str, Any],
        *,
        operation: str,
    ) -> Result[dict[str, Any], ProviderError]:
        result = await self._execute_request(
            method="POST",
            path=path,
            headers={"Content-Type": "application/json"},
            json_data={"client_id": self._client_id, "secret": self._secret, **body},
            operation=operation,
        )
        if isinstance(result, Failure):
            return result

        response = result.value
        if response.status_code not in SUCCESS_STATUSES:
            try:
                error_body = response.json()
            except ValueError:
                error_body = None
            if isinstance(error_body, dict) and error_body.get("error_type"):
                error = map_plaid_error(error_body, response)
                self._logger.warning(
                    "plaid_api_error",
                    operation=operation,
                    status_code=response.status_code,
                    error_type=error_body.get("error_type"),
                    error_code=error_body.get("error_code"),
                    request_id=error_body.get("request_id"),
                )
                return Failure(error=error)

        return self._parse_json_object(response, operation)

    async def create_link_token(
        self,
        *,
        client_name: str,
        client_user_id: str,
    ) -> Result[dict[str, Any], ProviderError]:
        """Mint a link token for the investments product."""
        return await self._post(
            "/link/token/create",
            {
                "client_name": client_name,
                "products": ["investments"],
                "country_codes": ["US"],
                "language": "en",
                "user": {"client_user_id": client_user_id},
            },
            operation="link_token_create",
        )

    async def exchange_public_token(
        self,
        public_token: str,
    ) -> Result[dict[str, Any], ProviderError]:
        """Swap a public token for a long-lived access token and item id."""
        return await self._post(
            "/item/public_token/exchange",
            {"public_token": public_token},
            operation="public_token_exchange",
        )

    async def get_item(self, access_token: str) -> Result[dict[str, Any], ProviderError]:
        return await self._post(
            "/item/get", {"access_token": access_token}, operation="item_get"
        )

    async def get_accounts(self, access_token: str) -> Result[dict[str, Any], ProviderError]:
        return await self._post(
            "/accounts/get", {"access_token": access_token}, operation="accounts_get"
        )

    async def get_holdings(
        self,
        access_token: str,
        account_id: str,
    ) -> Result[dict[str, Any], ProviderError]:
        """Holdings and securities of one account."""
        return await self._post(
            "/investments/holdings/get",
            {"access_token": access_token, "options": {"account_ids": [account_id]}},
            operation="investments_holdings_get",
        )

    async def remove_item(self, access_token: str) -> Result[dict[str, Any], ProviderError]:
        return await self._post(
            "/item/remove", {"access_token": access_token}, operation="item_remove"
        )
