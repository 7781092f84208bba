"""SqlAlchemyPortfolioRepository - SQLAlchemy implementation of PortfolioRepository.

Adapter for hexagonal architecture. Maps between domain entities (Account,
Holding, Activity) and database models, and encrypts credential material on
the way in.

The repository never commits: transaction boundaries belong to the unit of
work that created the session.

Reference:
    - src/domain/protocols/portfolio_repository.py
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.result import Failure
from src.domain.entities import Account, Activity, Holding
from src.domain.enums import AccountType, ActivityType, HoldingCategory, Provider
from src.domain.protocols.encryption_protocol import EncryptionProtocol
from src.infrastructure.persistence.models import Account as AccountModel
from src.infrastructure.persistence.models import Activity as ActivityModel
from src.infrastructure.persistence.models import Holding as HoldingModel

logger = structlog.get_logger(__name__)

CREDENTIAL_FIELDS: tuple[str, ...] = (
    "access_token",
    "access_token_secret",
    "refresh_token",
)
"""Account fields stored inside the encrypted credentials column."""

_ACCOUNT_COLUMNS: frozenset[str] = frozenset(
    {
        "name",
        "provider",
        "account_type",
        "balance",
        "is_connected",
        "token_expiry",
        "account_id_key",
        "external_account_id",
    }
)

_HOLDING_COLUMNS: frozenset[str] = frozenset(
    {
        "symbol",
        "name",
        "shares",
        "current_price",
        "total_value",
        "category",
        "change_percent",
    }
)


def _column_value(value: Any) -> Any:
    """Enums are stored by value."""
    if isinstance(value, (Provider, AccountType, HoldingCategory, ActivityType)):
        return value.value
    return value


class SqlAlchemyPortfolioRepository:
    """SQLAlchemy implementation of PortfolioRepository protocol.

    This class does NOT inherit from the protocol (Protocol uses structural typing).

    Example:
        >>> async with database.transaction() as session:
        ...     repo = SqlAlchemyPortfolioRepository(session, encryption_service)
        ...     account = await repo.get_account(account_id)
    """

    def __init__(self, session: AsyncSession, encryption: EncryptionProtocol) -> None:
        """Initialize repository.

        Args:
            session: SQLAlchemy async session (transaction owned by caller).
            encryption: Service used for the credentials column.
        """
        self._session = session
        self._encryption = encryption

    # =========================================================================
    # Accounts
    # =========================================================================

    async def get_account(self, account_id: UUID) -> Account | None:
        model = await self._session.get(AccountModel, account_id)
        if model is None:
            return None
        return self._account_to_domain(model)

    async def list_accounts(self) -> list[Account]:
        """List all accounts, oldest first."""
        stmt = select(AccountModel).order_by(AccountModel.created_at, AccountModel.id)
        result = await self._session.execute(stmt)
        return [self._account_to_domain(model) for model in result.scalars().all()]

    async def create_account(self, account: Account) -> Account:
        model = AccountModel(
            id=account.id,
            name=account.name,
            provider=account.provider.value,
            account_type=account.account_type.value,
            balance=account.balance,
            is_connected=account.is_connected,
            last_sync=account.last_sync,
            encrypted_credentials=self._encrypt_credentials(
                {name: getattr(account, name) for name in CREDENTIAL_FIELDS}
            ),
            token_expiry=account.token_expiry,
            account_id_key=account.account_id_key,
            external_account_id=account.external_account_id,
            created_at=account.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._account_to_domain(model)

    async def update_account(
        self,
        account_id: UUID,
        changes: dict[str, Any],
    ) -> Account | None:
        """Apply a partial update and stamp last_sync.

        Credential fields in ``changes`` are merged into the stored
        credentials and re-encrypted. last_sync is not updatable; every
        update sets it to now.

        Raises:
            ValueError: ``changes`` names a field that is not updatable.
        """
        unknown = set(changes) - _ACCOUNT_COLUMNS - set(CREDENTIAL_FIELDS)
        if unknown:
            raise ValueError(f"Unknown account fields: {sorted(unknown)}")

        model = await self._session.get(AccountModel, account_id)
        if model is None:
            return None

        for name, value in changes.items():
            if name in _ACCOUNT_COLUMNS:
                setattr(model, name, _column_value(value))

        credential_changes = {k: v for k, v in changes.items() if k in CREDENTIAL_FIELDS}
        if credential_changes:
            merged = self._decrypt_credentials(model) | credential_changes
            model.encrypted_credentials = self._encrypt_credentials(merged)

        model.last_sync = datetime.now(UTC)

        await self._session.flush()
        return self._account_to_domain(model)

    async def delete_account(self, account_id: UUID) -> bool:
        """Delete an account with its holdings and activities."""
        model = await self._session.get(AccountModel, account_id)
        if model is None:
            return False

        await self._session.execute(
            delete(HoldingModel).where(HoldingModel.account_id == account_id)
        )
        await self._session.execute(
            delete(ActivityModel).where(ActivityModel.account_id == account_id)
        )
        await self._session.delete(model)
        await self._session.flush()
        return True

    # =========================================================================
    # Holdings
    # =========================================================================

    async def get_holdings_by_account(self, account_id: UUID) -> list[Holding]:
        """List an account's holdings ordered by symbol."""
        stmt = (
            select(HoldingModel)
            .where(HoldingModel.account_id == account_id)
            .order_by(HoldingModel.symbol)
        )
        result = await self._session.execute(stmt)
        return [self._holding_to_domain(model) for model in result.scalars().all()]

    async def create_holding(self, holding: Holding) -> Holding:
        model = HoldingModel(
            id=holding.id,
            account_id=holding.account_id,
            symbol=holding.symbol,
            name=holding.name,
            shares=holding.shares,
            current_price=holding.current_price,
            total_value=holding.total_value,
            category=holding.category.value,
            change_percent=holding.change_percent,
            created_at=holding.created_at,
            updated_at=holding.updated_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._holding_to_domain(model)

    async def update_holding(
        self,
        holding_id: UUID,
        changes: dict[str, Any],
    ) -> Holding | None:
        """Apply a partial update to a holding.

        Raises:
            ValueError: ``changes`` names a field Holding does not have.
        """
        unknown = set(changes) - _HOLDING_COLUMNS
        if unknown:
            raise ValueError(f"Unknown holding fields: {sorted(unknown)}")

        model = await self._session.get(HoldingModel, holding_id)
        if model is None:
            return None

        for name, value in changes.items():
            setattr(model, name, _column_value(value))

        await self._session.flush()
        return self._holding_to_domain(model)

    async def delete_holding(self, holding_id: UUID) -> bool:
        model = await self._session.get(HoldingModel, holding_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    # =========================================================================
    # Activities
    # =========================================================================

    async def create_activity(self, activity: Activity) -> Activity:
        model = ActivityModel(
            id=activity.id,
            account_id=activity.account_id,
            type=activity.type.value,
            description=activity.description,
            amount=activity.amount,
            symbol=activity.symbol,
            timestamp=activity.timestamp,
        )
        self._session.add(model)
        await self._session.flush()
        return self._activity_to_domain(model)

    async def get_activities_by_account(
        self,
        account_id: UUID,
        limit: int | None = None,
    ) -> list[Activity]:
        """List an account's activities, newest first."""
        stmt = (
            select(ActivityModel)
            .where(ActivityModel.account_id == account_id)
            .order_by(ActivityModel.timestamp.desc(), ActivityModel.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return [self._activity_to_domain(model) for model in result.scalars().all()]

    # =========================================================================
    # Credential encryption
    # =========================================================================

    def _encrypt_credentials(self, values: dict[str, str | None]) -> bytes | None:
        present = {k: v for k, v in values.items() if v is not None}
        if not present:
            return None

        result = self._encryption.encrypt(present)
        if isinstance(result, Failure):
            raise ValueError(f"Failed to encrypt credentials: {result.error.message}")
        return result.value

    def _decrypt_credentials(self, model: AccountModel) -> dict[str, Any]:
        """Decrypt the credentials column.

        An undecryptable column (rotated key, corrupted row) reads as no
        credentials; the account then needs to be linked again.
        """
        if model.encrypted_credentials is None:
            return {}

        result = self._encryption.decrypt(model.encrypted_credentials)
        if isinstance(result, Failure):
            logger.error(
                "account_credentials_decryption_failed",
                account_id=str(model.id),
                error_code=result.error.code.value,
            )
            return {}
        return result.value

    # =========================================================================
    # Entity ↔ Model Mapping
    # =========================================================================

    def _account_to_domain(self, model: AccountModel) -> Account:
        credentials = self._decrypt_credentials(model)
        return Account(
            id=model.id,
            name=model.name,
            provider=Provider(model.provider),
            account_type=AccountType(model.account_type),
            balance=model.balance,
            is_connected=model.is_connected,
            last_sync=model.last_sync,
            access_token=credentials.get("access_token"),
            access_token_secret=credentials.get("access_token_secret"),
            refresh_token=credentials.get("refresh_token"),
            token_expiry=model.token_expiry,
            account_id_key=model.account_id_key,
            external_account_id=model.external_account_id,
            created_at=model.created_at,
        )

    def _holding_to_domain(self, model: HoldingModel) -> Holding:
        return Holding(
            id=model.id,
            account_id=model.account_id,
            symbol=model.symbol,
            name=model.name,
            shares=model.shares,
            current_price=model.current_price,
            total_value=model.total_value,
            category=HoldingCategory(model.category),
            change_percent=model.change_percent,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _activity_to_domain(self, model: ActivityModel) -> Activity:
        return Activity(
            id=model.id,
            account_id=model.account_id,
            type=ActivityType(model.type),
            description=model.description,
            amount=model.amount,
            symbol=model.symbol,
            timestamp=model.timestamp,
        )
