"""Portfolio repository and unit-of-work protocols.

The sync layer consumes persistence through this narrow contract only. Read
methods return domain entities (Account, Holding, Activity), never database
models. Partial updates take a mapping of field name to new value.

Transactions:
    A PortfolioRepository instance is bound to one session. Writes made
    through it become visible when the owning PortfolioUnitOfWork commits;
    an exception inside ``begin()`` rolls every write back.

Usage:
    async with unit_of_work.begin() as repo:
        account = await repo.get_account(account_id)
        await repo.update_account(account_id, {"balance": Decimal("10.00")})
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol
from uuid import UUID

from src.domain.entities.account import Account
from src.domain.entities.activity import Activity
from src.domain.entities.holding import Holding


class PortfolioRepository(Protocol):
    """Protocol for account, holding and activity persistence.

    Implementations:
        - SqlAlchemyPortfolioRepository: src/infrastructure/persistence/repositories/
    """

    # =========================================================================
    # Accounts
    # =========================================================================

    async def get_account(self, account_id: UUID) -> Account | None:
        """Find account by ID.

        Returns:
            Account entity if found, None otherwise.
        """
        ...

    async def list_accounts(self) -> list[Account]:
        """List every account, oldest first."""
        ...

    async def create_account(self, account: Account) -> Account:
        """Insert a new account."""
        ...

    async def update_account(
        self,
        account_id: UUID,
        changes: dict[str, Any],
    ) -> Account | None:
        """Apply a partial update.

        ``last_sync`` is always set to the current time and cannot be
        passed in ``changes``.

        Returns:
            Updated account, or None if it does not exist.
        """
        ...

    async def delete_account(self, account_id: UUID) -> bool:
        """Delete an account with its holdings and activities.

        Returns:
            True if the account existed.
        """
        ...

    # =========================================================================
    # Holdings
    # =========================================================================

    async def get_holdings_by_account(self, account_id: UUID) -> list[Holding]:
        """List holdings of an account, ordered by symbol."""
        ...

    async def create_holding(self, holding: Holding) -> Holding:
        """Insert a new holding."""
        ...

    async def update_holding(
        self,
        holding_id: UUID,
        changes: dict[str, Any],
    ) -> Holding | None:
        """Apply a partial update (``updated_at`` is refreshed)."""
        ...

    async def delete_holding(self, holding_id: UUID) -> bool:
        """Delete a holding. Returns True if it existed."""
        ...

    # =========================================================================
    # Activities
    # =========================================================================

    async def create_activity(self, activity: Activity) -> Activity:
        """Append an activity. Activities are never updated."""
        ...

    async def get_activities_by_account(
        self,
        account_id: UUID,
        limit: int | None = None,
    ) -> list[Activity]:
        """List activities of an account, newest first."""
        ...


class PortfolioUnitOfWork(Protocol):
    """Transaction boundary for repository work.

    ``begin()`` yields a repository bound to a fresh transaction that
    commits on normal exit and rolls back on exception.
    """

    def begin(self) -> AbstractAsyncContextManager[PortfolioRepository]:
        """Open a transaction and yield its repository."""
        ...
