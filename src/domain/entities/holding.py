"""Holding (position) domain entity.

Represents a current position in an account, written exclusively by the
sync orchestrator from normalized provider data.

Usage:
    holding = Holding(
        id=uuid7(),
        account_id=account.id,
        symbol="AAPL",
        name="Apple Inc.",
        shares=Decimal("10.0000"),
        current_price=Decimal("190.12"),
        total_value=Decimal("1901.20"),
        category=HoldingCategory.STOCKS,
    )
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from src.domain.enums.holding_category import HoldingCategory

SYNCED_FIELDS: tuple[str, ...] = (
    "name",
    "shares",
    "current_price",
    "total_value",
    "category",
    "change_percent",
)
"""Fields overwritten from provider data on every sync."""


@dataclass
class Holding:
    """Investment position in an account.

    Attributes:
        id: Unique holding identifier.
        account_id: Owning account (cascade delete).
        symbol: Ticker symbol, the reconciliation key within an account.
        name: Security name.
        shares: Quantity held (4dp).
        current_price: Price per share (2dp).
        total_value: Market value (2dp). Stored redundantly because some
            providers report it without exposing price and quantity.
        category: Canonical category.
        change_percent: Signed daily change in percent (2dp).
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: UUID
    account_id: UUID
    symbol: str
    name: str
    shares: Decimal
    current_price: Decimal
    total_value: Decimal
    category: HoldingCategory
    change_percent: Decimal = Decimal("0.00")
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate holding after initialization.

        Raises:
            ValueError: If symbol or name is empty.
        """
        if not self.symbol or not self.symbol.strip():
            raise ValueError("Symbol cannot be empty")

        if not self.name or not self.name.strip():
            raise ValueError("Holding name cannot be empty")

    def diff(self, values: dict[str, Any]) -> dict[str, Any]:
        """Return the subset of synced fields whose value differs.

        Args:
            values: Candidate values keyed by field name.

        Returns:
            Changed fields only (empty when the holding is unchanged).
        """
        return {
            name: values[name]
            for name in SYNCED_FIELDS
            if name in values and getattr(self, name) != values[name]
        }
