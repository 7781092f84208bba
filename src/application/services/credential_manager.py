"""Credential lifecycle manager.

Sole writer of account credential fields. Decides, per sync, whether the
stored credentials can be used as-is, must be refreshed first, or are dead:

    - No access token                      -> ConfigurationError
    - Expired or within the refresh margin -> refresh once (if possible),
                                              else ProviderAuthenticationError
    - Otherwise                            -> provider.probe()

Refreshes are serialized per account with a waiting asyncio lock. The
account is re-read under the lock so a caller that queued behind another
refresh reuses the rotated tokens instead of spending the (single-use)
refresh token a second time.
"""

import asyncio
from datetime import timedelta
from uuid import UUID

from src.core.enums import ErrorCode
from src.core.errors import ConfigurationError, DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.entities import Account
from src.domain.errors import ProviderAuthenticationError
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.portfolio_repository import PortfolioUnitOfWork
from src.domain.protocols.provider_protocol import ProviderProtocol
from src.domain.value_objects.provider_credentials import ProviderCredentials


class CredentialManager:
    """Keeps provider credentials usable for the sync orchestrator.

    Dependencies (injected via constructor):
        - PortfolioUnitOfWork: re-read and persist rotated credentials
        - LoggerProtocol: structured logging
    """

    def __init__(
        self,
        *,
        unit_of_work: PortfolioUnitOfWork,
        logger: LoggerProtocol,
        refresh_margin_seconds: int,
    ) -> None:
        """Initialize manager.

        Args:
            unit_of_work: Transaction factory for account reads/writes.
            logger: Structured logger.
            refresh_margin_seconds: Refresh this long before expiry.
        """
        self._unit_of_work = unit_of_work
        self._logger = logger
        self._margin = timedelta(seconds=refresh_margin_seconds)
        self._refresh_locks: dict[UUID, asyncio.Lock] = {}

    async def ensure_valid(
        self,
        account: Account,
        provider: ProviderProtocol,
    ) -> Result[ProviderCredentials, DomainError]:
        """Return credentials that can be used for the next provider calls.

        Args:
            account: Account as loaded by the caller.
            provider: Adapter for the account's provider.

        Returns:
            Success(ProviderCredentials): Usable credentials (possibly refreshed).
            Failure(ConfigurationError): Account was never linked.
            Failure(ProviderError): Refresh impossible or rejected, probe failed.
        """
        credentials = account.credentials
        if credentials is None:
            return Failure(error=self._missing_credentials(account))

        if credentials.is_expiring_soon(self._margin):
            return await self._refresh(account, credentials, provider)

        probe_result = await provider.probe(credentials)
        if isinstance(probe_result, Failure):
            self._logger.warning(
                "credential_probe_failed",
                account_id=str(account.id),
                provider=provider.slug,
                error_code=probe_result.error.code.value,
            )
            return probe_result

        return Success(value=credentials)

    async def link(
        self,
        account_id: UUID,
        credentials: ProviderCredentials,
    ) -> Result[Account, NotFoundError]:
        """Store credentials from the linking handshake and mark connected."""
        async with self._unit_of_work.begin() as repo:
            account = await repo.update_account(
                account_id,
                {
                    "access_token": credentials.access_token,
                    "access_token_secret": credentials.access_token_secret,
                    "refresh_token": credentials.refresh_token,
                    "token_expiry": credentials.expires_at,
                    "is_connected": True,
                },
            )

        if account is None:
            return Failure(error=_account_not_found(account_id))

        self._logger.info(
            "credentials_linked",
            account_id=str(account_id),
            provider=account.provider.value,
            has_refresh_token=credentials.can_refresh,
        )
        return Success(value=account)

    # =========================================================================
    # Refresh
    # =========================================================================

    async def _refresh(
        self,
        account: Account,
        credentials: ProviderCredentials,
        provider: ProviderProtocol,
    ) -> Result[ProviderCredentials, DomainError]:
        if not (provider.supports_refresh and credentials.can_refresh):
            self._logger.warning(
                "credentials_expired_no_refresh",
                account_id=str(account.id),
                provider=provider.slug,
            )
            return Failure(
                error=ProviderAuthenticationError(
                    code=ErrorCode.PROVIDER_AUTHENTICATION_FAILED,
                    message="Access token expired and cannot be refreshed",
                    provider_name=provider.slug,
                    is_token_expired=True,
                )
            )

        lock = self._refresh_locks.setdefault(account.id, asyncio.Lock())
        async with lock:
            async with self._unit_of_work.begin() as repo:
                current = await repo.get_account(account.id)

            if current is None:
                return Failure(error=_account_not_found(account.id))

            current_credentials = current.credentials
            if current_credentials is None:
                return Failure(error=self._missing_credentials(current))

            if not current_credentials.is_expiring_soon(self._margin):
                self._logger.info(
                    "credentials_already_refreshed",
                    account_id=str(account.id),
                    provider=provider.slug,
                )
                return Success(value=current_credentials)

            self._logger.info(
                "credential_refresh_started",
                account_id=str(account.id),
                provider=provider.slug,
            )
            result = await provider.refresh(current_credentials)
            if isinstance(result, Failure):
                self._logger.warning(
                    "credential_refresh_failed",
                    account_id=str(account.id),
                    provider=provider.slug,
                    error_code=result.error.code.value,
                )
                return result

            refreshed = result.value
            async with self._unit_of_work.begin() as repo:
                await repo.update_account(
                    account.id,
                    {
                        "access_token": refreshed.access_token,
                        "refresh_token": refreshed.refresh_token,
                        "token_expiry": refreshed.expires_at,
                    },
                )

            self._logger.info(
                "credential_refresh_succeeded",
                account_id=str(account.id),
                provider=provider.slug,
                expires_at=refreshed.expires_at.isoformat() if refreshed.expires_at else None,
            )
            return Success(value=refreshed)

    @staticmethod
    def _missing_credentials(account: Account) -> ConfigurationError:
        return ConfigurationError(
            code=ErrorCode.CREDENTIALS_MISSING,
            message=f"Account {account.name!r} has no stored provider credentials",
            setting_name="access_token",
        )


def _account_not_found(account_id: UUID) -> NotFoundError:
    return NotFoundError(
        code=ErrorCode.ACCOUNT_NOT_FOUND,
        message=f"Account {account_id} not found",
        resource_type="Account",
        resource_id=str(account_id),
    )
