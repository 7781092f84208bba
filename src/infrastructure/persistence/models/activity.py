"""Activity database model.

Append-only audit trail. Rows are inserted once and never updated, so the
model extends BaseModel (no updated_at).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseModel, UTCDateTime


class Activity(BaseModel):
    """Activity model.

    Fields:
        id: UUID primary key (from BaseModel)
        created_at: Insert timestamp (from BaseModel)
        account_id: FK to accounts table
        type: buy, sell, sync or error
        description: Human-readable description
        amount: Optional amount (2dp)
        symbol: Optional symbol
        timestamp: Activity time, set at creation
    """

    __tablename__ = "activities"

    account_id: Mapped[UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        comment="FK to accounts table",
    )

    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Activity type",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Human-readable description",
    )

    amount: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=19, scale=2),
        nullable=True,
        comment="Amount (new balance for sync entries)",
    )

    symbol: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Symbol for buy/sell entries",
    )

    timestamp: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        comment="Activity time",
    )

    __table_args__ = (
        # Newest-first listing per account
        Index("idx_activities_account_timestamp", "account_id", "timestamp"),
    )
