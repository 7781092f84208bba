"""Application DTOs returned by command handlers."""

from src.application.dtos.sync_dtos import (
    AccountSyncOutcome,
    SyncAccountResult,
    SyncAllAccountsResult,
)

__all__ = [
    "AccountSyncOutcome",
    "SyncAccountResult",
    "SyncAllAccountsResult",
]
