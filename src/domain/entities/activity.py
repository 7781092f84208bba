"""Activity domain entity.

Append-only audit trail entry. Immutable once created.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from src.domain.enums.activity_type import ActivityType


@dataclass(frozen=True, kw_only=True)
class Activity:
    """Audit trail entry for an account.

    Attributes:
        id: Unique activity identifier.
        account_id: Account the entry belongs to.
        type: Entry kind (buy, sell, sync, error).
        description: Human-readable description.
        amount: Optional amount (the new balance for sync entries).
        symbol: Optional symbol (buy/sell entries).
        timestamp: Creation time, never changed.
    """

    id: UUID
    account_id: UUID
    type: ActivityType
    description: str
    amount: Decimal | None = None
    symbol: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise ValueError("Activity description cannot be empty")
