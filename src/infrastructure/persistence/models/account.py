"""Account database model.

Stores investment accounts, including the provider credential material the
sync layer needs. Credential strings (access token, OAuth1 token secret,
refresh token) are kept AES-256-GCM encrypted in a single binary column;
only the token expiry stays in clear for expiry queries.

Reference:
    - src/domain/entities/account.py
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Index, LargeBinary, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel, UTCDateTime


class Account(BaseMutableModel):
    """Account model.

    Fields:
        id: UUID primary key (from BaseMutableModel)
        created_at: Timestamp when created (from BaseMutableModel)
        updated_at: Timestamp when last updated (from BaseMutableModel)
        name: Display name
        provider: Provider slug (etrade, schwab, plaid, manual)
        account_type: Account classification (individual, ira, 401k, ...)
        balance: Total account value (2dp)
        is_connected: Whether the provider link is usable
        last_sync: Time of the last account update
        encrypted_credentials: Encrypted JSON of the credential strings
        token_expiry: Access token expiry (nullable)
        account_id_key: E*TRADE accountIdKey (nullable)
        external_account_id: Schwab account hash or Plaid account id (nullable)

    Indexes:
        - ix_accounts_provider: Filter by provider
        - idx_accounts_connected: Connected provider accounts (sync all)
    """

    __tablename__ = "accounts"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name",
    )

    provider: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="Provider slug",
    )

    account_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Account type (individual, joint, ira, ...)",
    )

    balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=19, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Total account value",
    )

    is_connected: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether the provider link is usable",
    )

    last_sync: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
        comment="Last account update timestamp",
    )

    encrypted_credentials: Mapped[bytes | None] = mapped_column(
        LargeBinary,
        nullable=True,
        comment="AES-256-GCM encrypted credential JSON",
    )

    token_expiry: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
        comment="Access token expiry",
    )

    account_id_key: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="E*TRADE accountIdKey",
    )

    external_account_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Schwab account hash or Plaid account id",
    )

    __table_args__ = (Index("idx_accounts_connected", "provider", "is_connected"),)

    def __repr__(self) -> str:
        return (
            f"<Account("
            f"id={self.id}, "
            f"name={self.name!r}, "
            f"provider={self.provider!r}, "
            f"is_connected={self.is_connected}"
            f")>"
        )
