"""Activity queries (read operations).

Queries NEVER change state.
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class ListAccountActivities:
    """List an account's activity trail, newest first.

    Attributes:
        account_id: Account whose activities to list.
        limit: Maximum number of entries (None = all).

    Example:
        >>> query = ListAccountActivities(account_id=account_id, limit=20)
        >>> result = await handler.handle(query)
    """

    account_id: UUID
    limit: int | None = None
