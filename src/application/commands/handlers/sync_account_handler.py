"""SyncAccount command handler.

Reconciles one account's stored holdings against its provider.

Flow (SyncState):
    idle -> credential_check -> fetching -> normalizing -> reconciling
         -> logging -> done
    errored is reachable from credential_check, fetching, normalizing and
    reconciling.

    1. Load the account (absent -> NotFoundError, nothing written)
    2. Take the per-account sync lock without waiting (held -> ConflictError)
       and re-read the account under it
    3. Resolve the adapter and ensure credentials are usable
    4. Fetch accounts, pick the remote account, fetch its positions
    5. Normalize the payload
    6. Reconcile holdings, balance and identifiers in ONE transaction
    7. Write exactly one activity (sync or error)

Failure consequences are decided here and only here:
    - ProviderAuthenticationError: account.is_connected = False
    - Everything else: account untouched
    - Always: holdings untouched, one error activity
    - Storage failures while recording the outcome are logged, never raised
"""

from uuid_extensions import uuid7

from src.application.commands.sync_commands import SyncAccount
from src.application.dtos.sync_dtos import SyncAccountResult
from src.application.services.credential_manager import CredentialManager
from src.application.services.sync_run import SyncRun
from src.core.enums import ErrorCode
from src.core.errors import ConfigurationError, ConflictError, DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.entities import Account, Activity, Holding
from src.domain.enums import ActivityType, SyncState
from src.domain.errors import ProviderAuthenticationError, ReconciliationError
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.portfolio_repository import PortfolioUnitOfWork
from src.domain.protocols.provider_factory_protocol import ProviderFactoryProtocol
from src.domain.protocols.provider_protocol import NormalizedPortfolio, ProviderProtocol
from src.domain.protocols.sync_lock_protocol import SyncLockProtocol


class SyncAccountHandler:
    """Handler for SyncAccount command.

    Dependencies (injected via constructor):
        - PortfolioUnitOfWork: account/holding/activity persistence
        - ProviderFactoryProtocol: adapter per provider
        - CredentialManager: token validity and refresh
        - SyncLockProtocol: one in-flight sync per account
        - LoggerProtocol: structured logging

    Returns:
        Result[SyncAccountResult, DomainError]
    """

    def __init__(
        self,
        *,
        unit_of_work: PortfolioUnitOfWork,
        provider_factory: ProviderFactoryProtocol,
        credential_manager: CredentialManager,
        sync_lock: SyncLockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._unit_of_work = unit_of_work
        self._provider_factory = provider_factory
        self._credential_manager = credential_manager
        self._sync_lock = sync_lock
        self._logger = logger

    async def handle(self, cmd: SyncAccount) -> Result[SyncAccountResult, DomainError]:
        """Handle SyncAccount command.

        Returns:
            Success(SyncAccountResult): Holdings reconciled, sync activity written.
            Failure(NotFoundError): Account does not exist (no activity).
            Failure(DomainError): Any other failure (error activity written).
        """
        async with self._unit_of_work.begin() as repo:
            account = await repo.get_account(cmd.account_id)

        if account is None:
            return Failure(error=_not_found(cmd))

        logger = self._logger.bind(
            account_id=str(account.id),
            provider=account.provider.value,
        )

        lock_key = account.sync_lock_key()
        if not await self._sync_lock.acquire(lock_key):
            conflict = ConflictError(
                code=ErrorCode.SYNC_IN_PROGRESS,
                message="A sync is already running for this account",
                resource_type="Account",
                conflicting_field="account_id",
            )
            logger.warning("sync_rejected_in_progress")
            await self._record_failure(account, conflict, logger)
            return Failure(error=conflict)

        try:
            # Re-read under the lock; the first read may predate another
            # sync or a deletion.
            async with self._unit_of_work.begin() as repo:
                current = await repo.get_account(account.id)
            if current is None:
                logger.warning("sync_account_vanished")
                return Failure(error=_not_found(cmd))
            return await self._run(current, logger)
        finally:
            await self._sync_lock.release(lock_key)

    async def _run(
        self,
        account: Account,
        logger: LoggerProtocol,
    ) -> Result[SyncAccountResult, DomainError]:
        run = SyncRun(account_id=account.id, logger=logger)

        # Credential check
        run.advance(SyncState.CREDENTIAL_CHECK)
        provider_result = self._resolve_provider(account)
        if isinstance(provider_result, Failure):
            return await self._fail(run, account, provider_result.error, logger)
        provider = provider_result.value

        credentials_result = await self._credential_manager.ensure_valid(account, provider)
        if isinstance(credentials_result, Failure):
            return await self._fail(run, account, credentials_result.error, logger)
        credentials = credentials_result.value

        # Fetching
        run.advance(SyncState.FETCHING)
        accounts_result = await provider.fetch_accounts(credentials)
        if isinstance(accounts_result, Failure):
            return await self._fail(run, account, accounts_result.error, logger)
        raw_accounts = accounts_result.value

        ref_result = provider.resolve_account_ref(raw_accounts, account.provider_account_ref)
        if isinstance(ref_result, Failure):
            return await self._fail(run, account, ref_result.error, logger)

        positions_result = await provider.fetch_positions(credentials, ref_result.value)
        if isinstance(positions_result, Failure):
            return await self._fail(run, account, positions_result.error, logger)

        # Normalizing
        run.advance(SyncState.NORMALIZING)
        normalized_result = provider.normalize(raw_accounts, positions_result.value)
        if isinstance(normalized_result, Failure):
            return await self._fail(run, account, normalized_result.error, logger)
        portfolio = normalized_result.value

        # Reconciling
        run.advance(SyncState.RECONCILING)
        try:
            result = await self._reconcile(account, portfolio)
        except Exception as e:
            logger.error("sync_reconciliation_failed", error=e)
            reconciliation_error = ReconciliationError(
                code=ErrorCode.SYNC_RECONCILIATION_FAILED,
                message=f"Failed to persist reconciled holdings: {type(e).__name__}",
                account_id=str(account.id),
            )
            return await self._fail(run, account, reconciliation_error, logger)

        # Logging
        run.advance(SyncState.LOGGING)
        try:
            async with self._unit_of_work.begin() as repo:
                await repo.create_activity(
                    Activity(
                        id=uuid7(),
                        account_id=account.id,
                        type=ActivityType.SYNC,
                        description=result.message,
                        amount=result.balance,
                    )
                )
        except Exception as e:
            # Holdings are committed at this point; only the activity is lost
            logger.error("sync_activity_write_failed", error=e)
            return Failure(
                error=ReconciliationError(
                    code=ErrorCode.SYNC_RECONCILIATION_FAILED,
                    message=f"Failed to record sync activity: {type(e).__name__}",
                    account_id=str(account.id),
                )
            )

        run.advance(SyncState.DONE)
        logger.info(
            "sync_account_completed",
            created=result.created,
            updated=result.updated,
            unchanged=result.unchanged,
            deleted=result.deleted,
        )
        return Success(value=result)

    def _resolve_provider(
        self,
        account: Account,
    ) -> Result[ProviderProtocol, ConfigurationError]:
        if not account.is_syncable:
            return Failure(
                error=ConfigurationError(
                    code=ErrorCode.PROVIDER_NOT_SUPPORTED,
                    message=f"Account provider '{account.provider.value}' cannot be synced",
                    setting_name="provider",
                )
            )
        return self._provider_factory.get_provider(account.provider)

    async def _reconcile(
        self,
        account: Account,
        portfolio: NormalizedPortfolio,
    ) -> SyncAccountResult:
        """Make stored holdings equal the normalized set, atomically.

        Holdings match by exact symbol: matched rows update in place, new
        symbols insert, stored symbols missing from the provider delete.
        """
        created = updated = unchanged = deleted = 0
        incoming = {holding.symbol: holding for holding in portfolio.holdings}

        async with self._unit_of_work.begin() as repo:
            existing = {
                holding.symbol: holding
                for holding in await repo.get_holdings_by_account(account.id)
            }

            for symbol, stored in existing.items():
                if symbol not in incoming:
                    await repo.delete_holding(stored.id)
                    deleted += 1

            for symbol, normalized in incoming.items():
                stored = existing.get(symbol)
                if stored is None:
                    await repo.create_holding(
                        Holding(
                            id=uuid7(),
                            account_id=account.id,
                            symbol=symbol,
                            **normalized.as_fields(),
                        )
                    )
                    created += 1
                    continue

                changes = stored.diff(normalized.as_fields())
                if changes:
                    await repo.update_holding(stored.id, changes)
                    updated += 1
                else:
                    unchanged += 1

            await repo.update_account(
                account.id,
                {
                    "balance": portfolio.balance,
                    "is_connected": True,
                    **portfolio.identifier_fields(),
                },
            )

        return SyncAccountResult(
            account_id=account.id,
            created=created,
            updated=updated,
            unchanged=unchanged,
            deleted=deleted,
            balance=portfolio.balance,
            message=_summary(len(incoming), created, updated, unchanged, deleted),
        )

    async def _fail(
        self,
        run: SyncRun,
        account: Account,
        error: DomainError,
        logger: LoggerProtocol,
    ) -> Failure[DomainError]:
        failed_in = run.state
        run.advance(SyncState.ERRORED)
        logger.warning(
            "sync_account_failed",
            failed_in=failed_in.value,
            error_code=error.code.value,
            error_message=error.message,
        )
        await self._record_failure(account, error, logger)
        return Failure(error=error)

    async def _record_failure(
        self,
        account: Account,
        error: DomainError,
        logger: LoggerProtocol,
    ) -> None:
        """Write the error activity and apply the account consequence.

        A storage failure here is logged; the caller still returns the
        original error.
        """
        try:
            async with self._unit_of_work.begin() as repo:
                if isinstance(error, ProviderAuthenticationError):
                    await repo.update_account(account.id, {"is_connected": False})
                    logger.info("account_marked_disconnected")

                await repo.create_activity(
                    Activity(
                        id=uuid7(),
                        account_id=account.id,
                        type=ActivityType.ERROR,
                        description=f"Sync failed: {error.message}",
                    )
                )
        except Exception as e:
            logger.error(
                "sync_failure_record_failed",
                error=e,
                error_code=error.code.value,
            )


def _summary(total: int, created: int, updated: int, unchanged: int, deleted: int) -> str:
    message = (
        f"Synced {total} holdings: "
        f"{created} created, {updated} updated, {unchanged} unchanged"
    )
    if deleted > 0:
        message += f", {deleted} deleted"
    return message


def _not_found(cmd: SyncAccount) -> NotFoundError:
    return NotFoundError(
        code=ErrorCode.ACCOUNT_NOT_FOUND,
        message=f"Account {cmd.account_id} not found",
        resource_type="Account",
        resource_id=str(cmd.account_id),
    )
