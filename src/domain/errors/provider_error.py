"""Provider error types for domain protocol contracts.

These errors are part of the ProviderProtocol contract: they are the only
failure values an adapter or its normalizer may return. Provider-specific
status codes and error bodies are translated into one of these before they
cross the adapter boundary.

Taxonomy:
    ProviderAuthenticationError   credentials invalid/expired (disconnects)
    ProviderRateLimitError        throttled (transient)
    ProviderUnavailableError      timeout, connection failure, 5xx (transient)
    ProviderInvalidResponseError  unparseable payload (sync aborted, no writes)

Usage:
    from src.domain.errors import ProviderError, ProviderAuthenticationError

    async def fetch_accounts(self, credentials) -> Result[list[dict], ProviderError]:
        if not valid_token:
            return Failure(error=ProviderAuthenticationError(...))
        return Success(value=accounts)
"""

from dataclasses import dataclass
from typing import Any

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderError(DomainError):
    """Base financial provider API error.

    Attributes:
        code: Domain ErrorCode.
        message: Human-readable message.
        provider_name: Provider slug (etrade, schwab, plaid).
        details: Additional context (provider error code, operation).
    """

    provider_name: str
    details: dict[str, Any] | None = None

    @property
    def is_transient(self) -> bool:
        """Whether retrying later may succeed without user action."""
        return False


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderAuthenticationError(ProviderError):
    """Provider authentication failure.

    Returned when:
    - Access token is invalid, expired or revoked
    - Refresh token is invalid (terminal, user must re-authorize)
    - Authorization code, verifier or public token is rejected
    - Plaid item requires login

    Attributes:
        is_token_expired: Whether the failure is due to token expiration.
    """

    is_token_expired: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderUnavailableError(ProviderError):
    """Provider could not be reached or failed server-side.

    Returned on timeouts, connection errors and 5xx responses.

    Attributes:
        retry_after: Suggested retry delay in seconds (from provider).
    """

    retry_after: int | None = None

    @property
    def is_transient(self) -> bool:
        return True


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderRateLimitError(ProviderError):
    """Provider rate limit exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header).
    """

    retry_after: int | None = None

    @property
    def is_transient(self) -> bool:
        return True


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderInvalidResponseError(ProviderError):
    """Provider returned a payload that cannot be parsed.

    Returned when:
    - Response JSON (or form body) is malformed
    - Required fields are missing or not numeric
    - Response doesn't match the expected shape

    Attributes:
        response_body: Truncated raw body, for logs only.
    """

    response_body: str | None = None
