"""Integration tests for SqlAlchemyPortfolioRepository.

Tests cover:
- Account create / get / list / partial update
- Credentials encrypted at rest and merged on partial update
- Undecryptable credentials read as unlinked
- Holding CRUD ordered by symbol, one row per (account, symbol)
- Activities newest first with limit
- Cascade delete of holdings and activities
- Unit of work rollback

Architecture:
- Real SQLAlchemy async engine over a file-backed SQLite database
- Uses the unit_of_work fixture (fresh database per test)
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError
from uuid_extensions import uuid7

from src.domain.entities import Activity, Holding
from src.domain.enums import ActivityType, HoldingCategory, Provider
from src.infrastructure.persistence.models import Account as AccountModel
from src.infrastructure.persistence.unit_of_work import SqlAlchemyPortfolioUnitOfWork
from src.infrastructure.providers.encryption_service import EncryptionService
from tests.conftest import create_account

pytestmark = pytest.mark.integration


def create_holding(account_id, symbol: str = "AAPL", shares: str = "10") -> Holding:
    return Holding(
        id=uuid7(),
        account_id=account_id,
        symbol=symbol,
        name=f"{symbol} Inc.",
        shares=Decimal(shares),
        current_price=Decimal("100.00"),
        total_value=Decimal(shares) * Decimal("100.00"),
        category=HoldingCategory.STOCKS,
    )


async def insert_account(unit_of_work, **kwargs):
    async with unit_of_work.begin() as repo:
        return await repo.create_account(create_account(**kwargs))


# =============================================================================
# Accounts
# =============================================================================


class TestAccounts:
    async def test_create_and_get(self, unit_of_work):
        account = await insert_account(
            unit_of_work,
            provider=Provider.ETRADE,
            balance=Decimal("1234.56"),
            access_token_secret="token-secret",
            account_id_key="KEY",
        )

        async with unit_of_work.begin() as repo:
            loaded = await repo.get_account(account.id)

        assert loaded.provider == Provider.ETRADE
        assert loaded.balance == Decimal("1234.56")
        assert loaded.access_token == "access-token"
        assert loaded.access_token_secret == "token-secret"
        assert loaded.account_id_key == "KEY"
        assert loaded.token_expiry.tzinfo is not None

    async def test_get_unknown(self, unit_of_work):
        async with unit_of_work.begin() as repo:
            assert await repo.get_account(uuid7()) is None

    async def test_list_oldest_first(self, unit_of_work):
        first = await insert_account(unit_of_work, name="First")
        second = await insert_account(unit_of_work, name="Second")

        async with unit_of_work.begin() as repo:
            accounts = await repo.list_accounts()

        assert [a.id for a in accounts] == [first.id, second.id]

    async def test_credentials_encrypted_at_rest(self, unit_of_work, test_database):
        account = await insert_account(unit_of_work, access_token="plain-access-token")

        async with test_database.transaction() as session:
            model = await session.get(AccountModel, account.id)

        assert model.encrypted_credentials is not None
        assert b"plain-access-token" not in model.encrypted_credentials

    async def test_partial_credential_update_keeps_other_fields(self, unit_of_work):
        account = await insert_account(
            unit_of_work, access_token="old", access_token_secret="secret"
        )

        async with unit_of_work.begin() as repo:
            updated = await repo.update_account(account.id, {"access_token": "new"})

        assert updated.access_token == "new"
        assert updated.access_token_secret == "secret"
        assert updated.refresh_token == "refresh-token"

    async def test_update_stamps_last_sync(self, unit_of_work):
        account = await insert_account(unit_of_work)

        async with unit_of_work.begin() as repo:
            updated = await repo.update_account(account.id, {"balance": Decimal("10.00")})

        assert updated.last_sync is not None
        assert updated.last_sync >= datetime.now(UTC) - timedelta(minutes=1)

    async def test_every_update_advances_last_sync(self, unit_of_work):
        earlier = datetime.now(UTC) - timedelta(days=3)
        account = await insert_account(unit_of_work, last_sync=earlier)

        async with unit_of_work.begin() as repo:
            first = await repo.update_account(account.id, {"is_connected": False})
        async with unit_of_work.begin() as repo:
            second = await repo.update_account(account.id, {"access_token": "rotated"})

        assert first.is_connected is False
        assert first.last_sync > earlier
        assert second.last_sync >= first.last_sync

    async def test_last_sync_cannot_be_passed(self, unit_of_work):
        account = await insert_account(unit_of_work)

        with pytest.raises(ValueError, match="last_sync"):
            async with unit_of_work.begin() as repo:
                await repo.update_account(account.id, {"last_sync": None})

    async def test_update_unknown_field_rejected(self, unit_of_work):
        account = await insert_account(unit_of_work)

        with pytest.raises(ValueError, match="Unknown account fields"):
            async with unit_of_work.begin() as repo:
                await repo.update_account(account.id, {"nickname": "x"})

    async def test_update_unknown_account(self, unit_of_work):
        async with unit_of_work.begin() as repo:
            assert await repo.update_account(uuid7(), {"balance": Decimal("1.00")}) is None

    async def test_undecryptable_credentials_read_as_unlinked(
        self, unit_of_work, test_database
    ):
        account = await insert_account(unit_of_work)
        other_key = EncryptionService.create("z" * 32).value
        other_uow = SqlAlchemyPortfolioUnitOfWork(test_database, other_key)

        async with other_uow.begin() as repo:
            loaded = await repo.get_account(account.id)

        assert loaded is not None
        assert loaded.access_token is None
        assert loaded.credentials is None


# =============================================================================
# Holdings
# =============================================================================


class TestHoldings:
    async def test_crud(self, unit_of_work):
        account = await insert_account(unit_of_work)

        async with unit_of_work.begin() as repo:
            await repo.create_holding(create_holding(account.id, "TSLA"))
            aapl = await repo.create_holding(create_holding(account.id, "AAPL"))

        async with unit_of_work.begin() as repo:
            updated = await repo.update_holding(
                aapl.id, {"current_price": Decimal("110.00"), "total_value": Decimal("1100.00")}
            )
            holdings = await repo.get_holdings_by_account(account.id)

        assert [h.symbol for h in holdings] == ["AAPL", "TSLA"]
        assert updated.current_price == Decimal("110.00")
        assert holdings[0].shares == Decimal("10")

        async with unit_of_work.begin() as repo:
            assert await repo.delete_holding(aapl.id) is True
            assert await repo.delete_holding(aapl.id) is False
            remaining = await repo.get_holdings_by_account(account.id)

        assert [h.symbol for h in remaining] == ["TSLA"]

    async def test_one_row_per_symbol(self, unit_of_work):
        account = await insert_account(unit_of_work)

        with pytest.raises(IntegrityError):
            async with unit_of_work.begin() as repo:
                await repo.create_holding(create_holding(account.id, "AAPL"))
                await repo.create_holding(create_holding(account.id, "AAPL"))

    async def test_update_unknown_field_rejected(self, unit_of_work):
        account = await insert_account(unit_of_work)
        async with unit_of_work.begin() as repo:
            holding = await repo.create_holding(create_holding(account.id))

        with pytest.raises(ValueError):
            async with unit_of_work.begin() as repo:
                await repo.update_holding(holding.id, {"ticker": "X"})


# =============================================================================
# Activities, deletion and transactions
# =============================================================================


class TestActivities:
    async def test_newest_first_with_limit(self, unit_of_work):
        account = await insert_account(unit_of_work)
        base = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

        async with unit_of_work.begin() as repo:
            for minutes, description in ((0, "first"), (5, "second"), (10, "third")):
                await repo.create_activity(
                    Activity(
                        id=uuid7(),
                        account_id=account.id,
                        type=ActivityType.SYNC,
                        description=description,
                        amount=Decimal("1.00"),
                        timestamp=base + timedelta(minutes=minutes),
                    )
                )

        async with unit_of_work.begin() as repo:
            latest_two = await repo.get_activities_by_account(account.id, limit=2)
            everything = await repo.get_activities_by_account(account.id)

        assert [a.description for a in latest_two] == ["third", "second"]
        assert len(everything) == 3
        assert everything[0].timestamp == base + timedelta(minutes=10)


class TestDeleteAccount:
    async def test_cascade_removes_children(self, unit_of_work):
        account = await insert_account(unit_of_work)
        async with unit_of_work.begin() as repo:
            await repo.create_holding(create_holding(account.id))
            await repo.create_activity(
                Activity(
                    id=uuid7(),
                    account_id=account.id,
                    type=ActivityType.ERROR,
                    description="Sync failed: timeout",
                )
            )

        async with unit_of_work.begin() as repo:
            assert await repo.delete_account(account.id) is True

        async with unit_of_work.begin() as repo:
            assert await repo.get_account(account.id) is None
            assert await repo.get_holdings_by_account(account.id) == []
            assert await repo.get_activities_by_account(account.id) == []
            assert await repo.delete_account(account.id) is False


class TestUnitOfWork:
    async def test_exception_rolls_back(self, unit_of_work):
        account = await insert_account(unit_of_work)

        with pytest.raises(RuntimeError):
            async with unit_of_work.begin() as repo:
                await repo.create_holding(create_holding(account.id))
                await repo.update_account(account.id, {"balance": Decimal("99.00")})
                raise RuntimeError("boom")

        async with unit_of_work.begin() as repo:
            assert await repo.get_holdings_by_account(account.id) == []
            assert (await repo.get_account(account.id)).balance == Decimal("0.00")
