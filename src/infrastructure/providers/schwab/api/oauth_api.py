"""Schwab OAuth API client.

HTTP client for the Schwab OAuth 2.0 token endpoint. Returns the raw token
JSON; converting it to ProviderCredentials is the provider's job.

Endpoints:
    GET  /v1/oauth/authorize - User consent page (URL only, never called)
    POST /v1/oauth/token     - Code exchange and refresh (HTTP Basic auth)

Reference:
    - Schwab Trader API: https://developer.schwab.com
"""

import base64
from typing import Any
from urllib.parse import urlencode

from src.core.enums import ErrorCode
from src.core.result import Failure, Result
from src.domain.errors import ProviderAuthenticationError, ProviderError
from src.infrastructure.providers.base_api_client import BaseProviderAPIClient


class SchwabOAuthAPI(BaseProviderAPIClient):
    """HTTP client for Schwab OAuth endpoints.

    A 400 from the token endpoint means the code or refresh token was
    rejected (invalid_grant) and is reported as an authentication failure.
    """

    def __init__(
        self,
        *,
        base_url: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float,
    ) -> None:
        super().__init__(base_url=base_url, provider_name="schwab", timeout=timeout)
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri

    def build_authorization_url(self, scope: str) -> str:
        """Build the consent page URL the user must visit."""
        query = urlencode(
            {
                "client_id": self._client_id,
                "redirect_uri": self._redirect_uri,
                "response_type": "code",
                "scope": scope,
            }
        )
        return f"{self._url('/v1/oauth/authorize')}?{query}"

    def _basic_auth_header(self) -> str:
        """Base64-encoded client_id:client_secret for the token endpoint."""
        credentials = f"{self._client_id}:{self._client_secret}"
        encoded = base64.b64encode(credentials.encode()).decode()
        return f"Basic {encoded}"

    async def exchange_code(self, code: str) -> Result[dict[str, Any], ProviderError]:
        """Exchange an authorization code for a token pair."""
        return await self._post_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._redirect_uri,
            },
            operation="token_exchange",
        )

    async def refresh(self, refresh_token: str) -> Result[dict[str, Any], ProviderError]:
        """Exchange a refresh token for a new token pair."""
        return await self._post_token(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            operation="token_refresh",
        )

    async def _post_token(
        self,
        form_data: dict[str, str],
        *,
        operation: str,
    ) -> Result[dict[str, Any], ProviderError]:
        result = await self._execute_request(
            method="POST",
            path="/v1/oauth/token",
            headers={
                "Authorization": self._basic_auth_header(),
                "Content-Type": "application/x-www-form-urlencoded",
            },
            form_data=form_data,
            operation=operation,
        )
        if isinstance(result, Failure):
            return result

        response = result.value
        if response.status_code == 400:
            self._logger.warning(
                f"schwab_{operation}_rejected",
                status_code=response.status_code,
            )
            return Failure(
                error=ProviderAuthenticationError(
                    code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
                    message="Schwab rejected the authorization grant",
                    provider_name="schwab",
                    is_token_expired="expired" in response.text.lower(),
                )
            )

        return self._parse_json_object(response, operation)
