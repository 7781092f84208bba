"""Sync orchestration errors."""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationError(DomainError):
    """A sync could not complete its writes.

    Raised when reconciled holdings were rolled back, when the sync
    activity could not be recorded, or when a sync raised unexpectedly.

    Attributes:
        account_id: Account whose reconciliation failed.
    """

    account_id: str
