"""E*TRADE OAuth 1.0a handshake client.

Endpoints:
    GET /oauth/request_token - Request token pair (oauth_callback=oob)
    GET /oauth/access_token  - Access token pair (oauth_verifier)
    GET /oauth/revoke_access_token - Invalidate an access token pair

Token responses are form-encoded (oauth_token=...&oauth_token_secret=...),
not JSON.

Reference:
    - https://apisb.etrade.com/docs/api/authorization/request_token.html
"""

from urllib.parse import parse_qsl, urlencode

from src.core.result import Failure, Result, Success
from src.domain.errors import ProviderError
from src.infrastructure.providers.base_api_client import BaseProviderAPIClient
from src.infrastructure.providers.etrade.oauth1_signer import OAuth1Signer


class ETradeOAuthAPI(BaseProviderAPIClient):
    """HTTP client for the E*TRADE token handshake."""

    def __init__(
        self,
        *,
        base_url: str,
        authorize_url: str,
        consumer_key: str,
        signer: OAuth1Signer,
        timeout: float,
    ) -> None:
        super().__init__(base_url=base_url, provider_name="etrade", timeout=timeout)
        self._authorize_url = authorize_url
        self._consumer_key = consumer_key
        self._signer = signer

    def build_authorize_url(self, request_token: str) -> str:
        """Page where the user approves the request token."""
        query = urlencode({"key": self._consumer_key, "token": request_token})
        return f"{self._authorize_url}?{query}"

    async def get_request_token(self) -> Result[dict[str, str], ProviderError]:
        """Obtain a request token pair for the out-of-band flow."""
        return await self._token_call(
            path="/oauth/request_token",
            extra_oauth_params={"oauth_callback": "oob"},
            operation="request_token",
        )

    async def get_access_token(
        self,
        *,
        request_token: str,
        request_token_secret: str,
        verifier: str,
    ) -> Result[dict[str, str], ProviderError]:
        """Exchange the authorized request token and verifier."""
        return await self._token_call(
            path="/oauth/access_token",
            token=request_token,
            token_secret=request_token_secret,
            extra_oauth_params={"oauth_verifier": verifier},
            operation="access_token",
        )

    async def revoke_access_token(
        self,
        *,
        access_token: str,
        access_token_secret: str,
    ) -> Result[None, ProviderError]:
        """Revoke the access token pair (GET /oauth/revoke_access_token)."""
        path = "/oauth/revoke_access_token"
        header = self._signer.authorization_header(
            "GET",
            self._url(path),
            token=access_token,
            token_secret=access_token_secret,
        )
        result = await self._execute_request(
            method="GET",
            path=path,
            headers={"Authorization": header},
            operation="revoke_access_token",
        )
        if isinstance(result, Failure):
            return result

        error_result = self._check_error_response(result.value, "revoke_access_token")
        if error_result is not None:
            return error_result
        return Success(value=None)

    async def _token_call(
        self,
        *,
        path: str,
        operation: str,
        token: str | None = None,
        token_secret: str | None = None,
        extra_oauth_params: dict[str, str] | None = None,
    ) -> Result[dict[str, str], ProviderError]:
        header = self._signer.authorization_header(
            "GET",
            self._url(path),
            token=token,
            token_secret=token_secret,
            extra_oauth_params=extra_oauth_params,
        )
        result = await self._execute_request(
            method="GET",
            path=path,
            headers={"Authorization": header},
            operation=operation,
        )
        if isinstance(result, Failure):
            return result

        response = result.value
        error_result = self._check_error_response(response, operation)
        if error_result is not None:
            return error_result

        values = dict(parse_qsl(response.text.strip()))
        if not values.get("oauth_token") or not values.get("oauth_token_secret"):
            self._logger.warning(
                "etrade_token_response_incomplete",
                operation=operation,
                fields=sorted(values),
            )
            return self._invalid_response(
                response, "E*TRADE token response is missing oauth_token fields"
            )

        self._logger.info("etrade_token_call_succeeded", operation=operation)
        return Success(value=values)
