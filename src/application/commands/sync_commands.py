"""Sync commands for provider-backed accounts.

Commands that trigger reconciliation of stored holdings against a provider.
These are blocking operations: the handler returns once the sync finished
and its activity was written.

Architecture:
    - Commands are immutable value objects representing user intent
    - Handlers execute the sync and return Result types
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class SyncAccount:
    """Sync one account against its provider.

    Attributes:
        account_id: Account to sync.
    """

    account_id: UUID


@dataclass(frozen=True, kw_only=True)
class SyncAllAccounts:
    """Sync every connected, provider-backed account concurrently."""
