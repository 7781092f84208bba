"""Holding database model.

Current positions of an account, written only by the sync orchestrator.

Architecture:
    - Holdings belong to accounts (FK relationship with CASCADE delete)
    - One row per (account_id, symbol); symbol is the reconciliation key
    - Category stored as lowercase string

Reference:
    - src/domain/entities/holding.py
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel


class Holding(BaseMutableModel):
    """Holding model for position storage.

    Fields:
        id: UUID primary key (from BaseMutableModel)
        created_at: Timestamp when created (from BaseMutableModel)
        updated_at: Timestamp when last updated (from BaseMutableModel)
        account_id: FK to accounts table
        symbol: Ticker symbol
        name: Security name
        shares: Quantity held (4dp)
        current_price: Price per share (2dp)
        total_value: Market value (2dp)
        category: Canonical category (stocks, etfs, ...)
        change_percent: Signed daily change percent (2dp)

    Indexes:
        - ix_holdings_account_id: FK lookup
        - uq_holdings_account_symbol: Unique (account_id, symbol)
    """

    __tablename__ = "holdings"

    account_id: Mapped[UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="FK to accounts table",
    )

    symbol: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Ticker symbol (AAPL, VTI, ...)",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Security name",
    )

    # 4dp for fractional shares
    shares: Mapped[Decimal] = mapped_column(
        Numeric(precision=19, scale=4),
        nullable=False,
        comment="Quantity held",
    )

    current_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=19, scale=2),
        nullable=False,
        comment="Price per share",
    )

    total_value: Mapped[Decimal] = mapped_column(
        Numeric(precision=19, scale=2),
        nullable=False,
        comment="Market value of the position",
    )

    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Holding category",
    )

    change_percent: Mapped[Decimal] = mapped_column(
        Numeric(precision=9, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Signed daily change percent",
    )

    __table_args__ = (
        UniqueConstraint("account_id", "symbol", name="uq_holdings_account_symbol"),
    )

    def __repr__(self) -> str:
        return (
            f"<Holding("
            f"id={self.id}, "
            f"symbol={self.symbol!r}, "
            f"shares={self.shares}, "
            f"total_value={self.total_value}"
            f")>"
        )
