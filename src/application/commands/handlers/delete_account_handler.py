"""DeleteAccount command handler.

Revokes the account's provider credentials (best-effort) and deletes the
account with its holdings and activities in one transaction. Holds the
account's sync lock throughout, so it never overlaps a running sync
(held -> ConflictError).
"""

from src.application.commands.account_commands import DeleteAccount
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.entities import Account
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.portfolio_repository import PortfolioUnitOfWork
from src.domain.protocols.provider_factory_protocol import ProviderFactoryProtocol
from src.domain.protocols.sync_lock_protocol import SyncLockProtocol


class DeleteAccountHandler:
    """Handler for DeleteAccount command."""

    def __init__(
        self,
        *,
        unit_of_work: PortfolioUnitOfWork,
        provider_factory: ProviderFactoryProtocol,
        sync_lock: SyncLockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._unit_of_work = unit_of_work
        self._provider_factory = provider_factory
        self._sync_lock = sync_lock
        self._logger = logger

    async def handle(self, cmd: DeleteAccount) -> Result[None, DomainError]:
        """Handle DeleteAccount command.

        Returns:
            Success(None): Account and its children deleted.
            Failure(NotFoundError): Account does not exist.
            Failure(ConflictError): A sync is running for the account.
        """
        async with self._unit_of_work.begin() as repo:
            account = await repo.get_account(cmd.account_id)

        if account is None:
            return Failure(error=_not_found(cmd))

        lock_key = account.sync_lock_key()
        if not await self._sync_lock.acquire(lock_key):
            self._logger.warning(
                "account_delete_rejected_sync_in_progress",
                account_id=str(account.id),
            )
            return Failure(
                error=ConflictError(
                    code=ErrorCode.SYNC_IN_PROGRESS,
                    message="Cannot delete an account while it is syncing",
                    resource_type="Account",
                    conflicting_field="account_id",
                )
            )

        try:
            await self._revoke_credentials(account)

            async with self._unit_of_work.begin() as repo:
                deleted = await repo.delete_account(account.id)
        finally:
            await self._sync_lock.release(lock_key)

        if not deleted:
            return Failure(error=_not_found(cmd))

        self._logger.info(
            "account_deleted",
            account_id=str(account.id),
            provider=account.provider.value,
        )
        return Success(value=None)

    async def _revoke_credentials(self, account: Account) -> None:
        """Revoke stored credentials; failures never block deletion."""
        credentials = account.credentials
        if credentials is None or not account.is_syncable:
            return

        provider_result = self._provider_factory.get_provider(account.provider)
        if isinstance(provider_result, Failure):
            self._logger.warning(
                "credential_revoke_skipped",
                account_id=str(account.id),
                error_code=provider_result.error.code.value,
            )
            return

        result = await provider_result.value.revoke(credentials)
        if isinstance(result, Failure):
            self._logger.warning(
                "credential_revoke_failed",
                account_id=str(account.id),
                provider=account.provider.value,
                error_code=result.error.code.value,
            )
            return

        self._logger.info(
            "credential_revoked",
            account_id=str(account.id),
            provider=account.provider.value,
        )


def _not_found(cmd: DeleteAccount) -> NotFoundError:
    return NotFoundError(
        code=ErrorCode.ACCOUNT_NOT_FOUND,
        message=f"Account {cmd.account_id} not found",
        resource_type="Account",
        resource_id=str(cmd.account_id),
    )
