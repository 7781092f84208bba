"""Sync DTOs (Data Transfer Objects).

Result dataclasses returned by the sync command handlers.

DTOs:
    - SyncAccountResult: Result from SyncAccount command
    - AccountSyncOutcome: One account's outcome within SyncAllAccounts
    - SyncAllAccountsResult: Result from SyncAllAccounts command
"""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from src.core.errors import DomainError
from src.core.result import Result, Success


@dataclass
class SyncAccountResult:
    """Result of one account sync.

    Attributes:
        account_id: Synced account.
        created: Holdings inserted.
        updated: Holdings changed in place.
        unchanged: Holdings matched with identical values.
        deleted: Stored holdings absent from the provider.
        balance: New account balance.
        message: Human-readable summary.
    """

    account_id: UUID
    created: int
    updated: int
    unchanged: int
    deleted: int
    balance: Decimal
    message: str


@dataclass
class AccountSyncOutcome:
    """Outcome of one account within a SyncAllAccounts run."""

    account_id: UUID
    result: Result[SyncAccountResult, DomainError]

    @property
    def succeeded(self) -> bool:
        return isinstance(self.result, Success)


@dataclass
class SyncAllAccountsResult:
    """Result of syncing every connected account.

    Attributes:
        outcomes: Per-account results, in account order.
    """

    outcomes: list[AccountSyncOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded
