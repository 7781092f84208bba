"""SyncAllAccounts command handler.

Syncs every connected, provider-backed account concurrently. Each account
runs through SyncAccountHandler independently, so one account's failure
never affects another; the per-account sync lock still rejects overlaps.
An account whose sync raises is reported as a failed outcome.
"""

import asyncio
from uuid import UUID

from src.application.commands.handlers.sync_account_handler import SyncAccountHandler
from src.application.commands.sync_commands import SyncAccount, SyncAllAccounts
from src.application.dtos.sync_dtos import (
    AccountSyncOutcome,
    SyncAccountResult,
    SyncAllAccountsResult,
)
from src.core.enums import ErrorCode
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.errors import ReconciliationError
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.portfolio_repository import PortfolioUnitOfWork


class SyncAllAccountsHandler:
    """Handler for SyncAllAccounts command."""

    def __init__(
        self,
        *,
        unit_of_work: PortfolioUnitOfWork,
        sync_account_handler: SyncAccountHandler,
        logger: LoggerProtocol,
    ) -> None:
        self._unit_of_work = unit_of_work
        self._sync_account_handler = sync_account_handler
        self._logger = logger

    async def handle(
        self,
        cmd: SyncAllAccounts,
    ) -> Result[SyncAllAccountsResult, DomainError]:
        """Handle SyncAllAccounts command.

        Returns:
            Success(SyncAllAccountsResult): Per-account outcomes. Individual
                failures are reported inside the result, not as Failure.
        """
        async with self._unit_of_work.begin() as repo:
            accounts = await repo.list_accounts()

        targets = [
            account for account in accounts if account.is_syncable and account.is_connected
        ]
        self._logger.info("sync_all_accounts_started", account_count=len(targets))

        results = await asyncio.gather(
            *(
                self._sync_account_handler.handle(SyncAccount(account_id=account.id))
                for account in targets
            ),
            return_exceptions=True,
        )

        summary = SyncAllAccountsResult(
            outcomes=[
                AccountSyncOutcome(
                    account_id=account.id,
                    result=self._as_result(account.id, result),
                )
                for account, result in zip(targets, results, strict=True)
            ]
        )
        self._logger.info(
            "sync_all_accounts_completed",
            succeeded=summary.succeeded,
            failed=summary.failed,
        )
        return Success(value=summary)

    def _as_result(
        self,
        account_id: UUID,
        result: Result[SyncAccountResult, DomainError] | BaseException,
    ) -> Result[SyncAccountResult, DomainError]:
        if not isinstance(result, BaseException):
            return result
        # Cancellation of the batch is not an account failure
        if not isinstance(result, Exception):
            raise result

        self._logger.error(
            "sync_account_raised",
            account_id=str(account_id),
            error=result,
        )
        return Failure(
            error=ReconciliationError(
                code=ErrorCode.SYNC_RECONCILIATION_FAILED,
                message=f"Sync raised {type(result).__name__}",
                account_id=str(account_id),
            )
        )
