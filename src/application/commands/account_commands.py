"""Account management commands."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class DeleteAccount:
    """Delete an account with its holdings and activities.

    Stored provider credentials are revoked first, best-effort.

    Attributes:
        account_id: Account to delete.
    """

    account_id: UUID
