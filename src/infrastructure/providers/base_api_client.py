"""Base API client for provider HTTP communication.

This module provides a base class for provider API clients that handles:
- HTTP request execution with an explicit timeout
- Response status code interpretation
- JSON parsing with error handling
- Structured logging with provider context

Subclasses only need to:
1. Build authentication headers (Bearer token, OAuth1 signature, Basic)
2. Call the base methods for HTTP operations

Architecture:
    - Infrastructure layer (adapter for external APIs)
    - Uses httpx for async HTTP
    - Returns Result types (no exceptions for provider failures)
"""

from typing import Any

import httpx
import structlog

from src.core.constants import PROVIDER_TIMEOUT_DEFAULT, RESPONSE_BODY_MAX_LENGTH
from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.errors import (
    ProviderAuthenticationError,
    ProviderError,
    ProviderInvalidResponseError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)

SUCCESS_STATUSES: frozenset[int] = frozenset({200, 201})


def parse_retry_after(value: str | None) -> int | None:
    """Parse a Retry-After header given in seconds.

    HTTP-date values are ignored (None), callers fall back to their own
    backoff.
    """
    if value is None:
        return None
    value = value.strip()
    return int(value) if value.isdigit() else None


class BaseProviderAPIClient:
    """Base class for provider API clients with shared HTTP handling.

    Status mapping:
        200/201   success
        429       ProviderRateLimitError (Retry-After honored)
        401       ProviderAuthenticationError (token expired)
        403       ProviderAuthenticationError
        5xx       ProviderUnavailableError
        other     ProviderInvalidResponseError
        timeout / connection error  ProviderUnavailableError

    Attributes:
        _base_url: Provider API base URL (without trailing slash).
        _provider_name: Provider identifier for logging and error messages.
        _timeout: HTTP request timeout in seconds.
        _logger: Structured logger with provider context.

    Example:
        >>> class SchwabAccountsAPI(BaseProviderAPIClient):
        ...     async def get_account_numbers(self, access_token: str):
        ...         return await self._execute_and_parse_list(
        ...             method="GET",
        ...             path="/trader/v1/accounts/accountNumbers",
        ...             headers={"Authorization": f"Bearer {access_token}"},
        ...             operation="get_account_numbers",
        ...         )
    """

    def __init__(
        self,
        *,
        base_url: str,
        provider_name: str,
        timeout: float = PROVIDER_TIMEOUT_DEFAULT,
    ) -> None:
        """Initialize base provider API client.

        Args:
            base_url: Provider API base URL (e.g., "https://api.schwabapi.com").
            provider_name: Provider identifier (e.g., "schwab", "etrade").
            timeout: HTTP request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._provider_name = provider_name
        self._timeout = timeout
        self._logger = structlog.get_logger(f"{provider_name}_api")

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _execute_request(
        self,
        *,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
        json_data: dict[str, Any] | None = None,
        form_data: dict[str, str] | None = None,
        operation: str,
    ) -> Result[httpx.Response, ProviderError]:
        """Execute HTTP request with error handling.

        Args:
            method: HTTP method (GET, POST, etc.).
            path: URL path relative to base_url.
            headers: HTTP headers including authentication.
            params: Optional query parameters.
            json_data: Optional JSON body.
            form_data: Optional form-encoded body (OAuth token endpoints).
            operation: Operation name for logging.

        Returns:
            Success(httpx.Response): Raw HTTP response (any status).
            Failure(ProviderUnavailableError): On timeout or connection error.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method=method,
                    url=self._url(path),
                    headers=headers,
                    params=params,
                    json=json_data,
                    data=form_data,
                )
            return Success(value=response)

        except httpx.TimeoutException as e:
            self._logger.warning(
                f"{self._provider_name}_api_timeout",
                operation=operation,
                timeout=self._timeout,
                error=str(e),
            )
            return Failure(
                error=ProviderUnavailableError(
                    code=ErrorCode.PROVIDER_UNAVAILABLE,
                    message=f"{self._provider_name.title()} API request timed out",
                    provider_name=self._provider_name,
                    details={"operation": operation},
                )
            )

        except httpx.RequestError as e:
            self._logger.warning(
                f"{self._provider_name}_api_connection_error",
                operation=operation,
                error=str(e),
            )
            return Failure(
                error=ProviderUnavailableError(
                    code=ErrorCode.PROVIDER_UNAVAILABLE,
                    message=f"Failed to connect to {self._provider_name.title()} API: {e}",
                    provider_name=self._provider_name,
                    details={"operation": operation},
                )
            )

    def _check_error_response(
        self,
        response: httpx.Response,
        operation: str,
    ) -> Failure[ProviderError] | None:
        """Check HTTP response for errors and return appropriate ProviderError.

        Returns:
            Failure(ProviderError) if error detected, None if response is OK.
        """
        status = response.status_code

        if status in SUCCESS_STATUSES:
            return None

        # Rate limiting (429)
        if status == 429:
            retry_seconds = parse_retry_after(response.headers.get("Retry-After"))
            self._logger.warning(
                f"{self._provider_name}_api_rate_limited",
                operation=operation,
                retry_after=retry_seconds,
            )
            return Failure(
                error=ProviderRateLimitError(
                    code=ErrorCode.PROVIDER_RATE_LIMITED,
                    message=f"{self._provider_name.title()} API rate limit exceeded",
                    provider_name=self._provider_name,
                    retry_after=retry_seconds,
                )
            )

        # Authentication errors (401)
        if status == 401:
            self._logger.warning(
                f"{self._provider_name}_api_auth_failed",
                operation=operation,
            )
            return Failure(
                error=ProviderAuthenticationError(
                    code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
                    message=f"{self._provider_name.title()} access token is invalid or expired",
                    provider_name=self._provider_name,
                    is_token_expired=True,
                )
            )

        # Forbidden (403)
        if status == 403:
            self._logger.warning(
                f"{self._provider_name}_api_forbidden",
                operation=operation,
            )
            return Failure(
                error=ProviderAuthenticationError(
                    code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
                    message=f"Access denied to {self._provider_name.title()} resource",
                    provider_name=self._provider_name,
                    is_token_expired=False,
                )
            )

        # Server errors (5xx)
        if status >= 500:
            self._logger.warning(
                f"{self._provider_name}_api_server_error",
                operation=operation,
                status_code=status,
            )
            return Failure(
                error=ProviderUnavailableError(
                    code=ErrorCode.PROVIDER_UNAVAILABLE,
                    message=f"{self._provider_name.title()} API server error: {status}",
                    provider_name=self._provider_name,
                    retry_after=parse_retry_after(response.headers.get("Retry-After")),
                )
            )

        # Not found (404) and anything else unexpected
        self._logger.warning(
            f"{self._provider_name}_api_unexpected_status",
            operation=operation,
            status_code=status,
        )
        return Failure(
            error=ProviderInvalidResponseError(
                code=ErrorCode.PROVIDER_RESPONSE_INVALID,
                message=f"Unexpected response from {self._provider_name.title()}: {status}",
                provider_name=self._provider_name,
                response_body=response.text[:RESPONSE_BODY_MAX_LENGTH],
            )
        )

    def _invalid_response(
        self,
        response: httpx.Response,
        message: str,
    ) -> Failure[ProviderError]:
        return Failure(
            error=ProviderInvalidResponseError(
                code=ErrorCode.PROVIDER_RESPONSE_INVALID,
                message=message,
                provider_name=self._provider_name,
                response_body=response.text[:RESPONSE_BODY_MAX_LENGTH],
            )
        )

    def _parse_json_object(
        self,
        response: httpx.Response,
        operation: str,
    ) -> Result[dict[str, Any], ProviderError]:
        """Parse response as JSON object with error handling.

        Returns:
            Success(dict): Parsed JSON object.
            Failure(ProviderError): On HTTP error or invalid JSON.
        """
        error_result = self._check_error_response(response, operation)
        if error_result is not None:
            return error_result

        try:
            data = response.json()
        except ValueError as e:
            self._logger.error(
                f"{self._provider_name}_api_invalid_json",
                operation=operation,
                error=str(e),
            )
            return self._invalid_response(
                response, f"Invalid JSON response from {self._provider_name.title()}"
            )

        if not isinstance(data, dict):
            self._logger.warning(
                f"{self._provider_name}_api_unexpected_format",
                operation=operation,
                data_type=type(data).__name__,
            )
            return self._invalid_response(
                response, f"Expected object response from {self._provider_name.title()}"
            )

        self._logger.debug(
            f"{self._provider_name}_api_succeeded",
            operation=operation,
        )
        return Success(value=data)

    def _parse_json_list(
        self,
        response: httpx.Response,
        operation: str,
    ) -> Result[list[dict[str, Any]], ProviderError]:
        """Parse response as JSON list with error handling.

        Returns:
            Success(list[dict]): Parsed JSON list.
            Failure(ProviderError): On HTTP error, invalid JSON or non-list body.
        """
        error_result = self._check_error_response(response, operation)
        if error_result is not None:
            return error_result

        try:
            data = response.json()
        except ValueError as e:
            self._logger.error(
                f"{self._provider_name}_api_invalid_json",
                operation=operation,
                error=str(e),
            )
            return self._invalid_response(
                response, f"Invalid JSON response from {self._provider_name.title()}"
            )

        if not isinstance(data, list):
            self._logger.warning(
                f"{self._provider_name}_api_unexpected_format",
                operation=operation,
                data_type=type(data).__name__,
            )
            return self._invalid_response(
                response, f"Expected list response from {self._provider_name.title()}"
            )

        self._logger.debug(
            f"{self._provider_name}_api_succeeded",
            operation=operation,
            count=len(data),
        )
        return Success(value=data)

    async def _execute_and_parse_object(
        self,
        *,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
        json_data: dict[str, Any] | None = None,
        form_data: dict[str, str] | None = None,
        operation: str,
    ) -> Result[dict[str, Any], ProviderError]:
        """Execute request and parse response as JSON object."""
        result = await self._execute_request(
            method=method,
            path=path,
            headers=headers,
            params=params,
            json_data=json_data,
            form_data=form_data,
            operation=operation,
        )

        if isinstance(result, Failure):
            return result

        return self._parse_json_object(result.value, operation)

    async def _execute_and_parse_list(
        self,
        *,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
        operation: str,
    ) -> Result[list[dict[str, Any]], ProviderError]:
        """Execute request and parse response as JSON list."""
        result = await self._execute_request(
            method=method,
            path=path,
            headers=headers,
            params=params,
            operation=operation,
        )

        if isinstance(result, Failure):
            return result

        return self._parse_json_list(result.value, operation)
