"""End-to-end sync tests: real repository, real provider adapters, mocked HTTP.

Properties covered:
- Idempotence of repeated syncs
- Reconciliation completeness ({AAPL, TSLA} -> {AAPL, MSFT})
- Exactly one activity per sync attempt
- No partial writes when normalization fails
- Credentials and connection untouched by transient failures
- Expired token refreshed exactly once, new token used for the fetch
- Overlapping syncs of one account: one reconciles, the other is rejected
- Deleting an account mid-sync: rejected under the lock, contained without it
- Security type classification defaults

Architecture:
- SQLite-backed unit of work (unit_of_work fixture)
- ProviderFactory over test_settings, HTTP mocked with pytest-httpx
"""

import asyncio
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from pytest_httpx import HTTPXMock

from src.application.commands.account_commands import DeleteAccount
from src.application.commands.handlers.delete_account_handler import DeleteAccountHandler
from src.application.commands.handlers.sync_account_handler import SyncAccountHandler
from src.application.commands.sync_commands import SyncAccount
from src.application.services.credential_manager import CredentialManager
from src.core.errors import ConflictError
from src.core.result import Failure, Success
from src.domain.enums import ActivityType, HoldingCategory, Provider
from src.domain.errors import (
    ProviderAuthenticationError,
    ProviderInvalidResponseError,
    ProviderRateLimitError,
    ProviderUnavailableError,
    ReconciliationError,
)
from src.domain.protocols.provider_protocol import (
    NormalizedHolding,
    NormalizedPortfolio,
    ProviderPositionList,
)
from src.infrastructure.locking import InMemorySyncLock
from src.infrastructure.providers.provider_factory import ProviderFactory
from tests.conftest import create_account

pytestmark = pytest.mark.integration

SCHWAB_URL = "https://api.schwabapi.com"
ACCOUNT_NUMBERS_URL = f"{SCHWAB_URL}/trader/v1/accounts/accountNumbers"
ACCOUNT_URL = f"{SCHWAB_URL}/trader/v1/accounts/HASH1?fields=positions"
TOKEN_URL = f"{SCHWAB_URL}/v1/oauth/token"

ETRADE_URL = "https://apisb.etrade.com"


# =============================================================================
# Helpers
# =============================================================================


def schwab_position(symbol: str, quantity: float, market_value: float, asset_type="EQUITY"):
    return {
        "longQuantity": quantity,
        "shortQuantity": 0.0,
        "marketValue": market_value,
        "instrument": {"assetType": asset_type, "symbol": symbol, "description": symbol},
    }


def mock_schwab_sync(
    httpx_mock: HTTPXMock,
    positions: list[dict],
    *,
    balance: float = 10000.0,
    access_token: str | None = None,
) -> None:
    """Register the two Schwab calls one sync makes."""
    headers = {"Authorization": f"Bearer {access_token}"} if access_token else None
    httpx_mock.add_response(
        url=ACCOUNT_NUMBERS_URL,
        json=[{"accountNumber": "12345678", "hashValue": "HASH1"}],
        match_headers=headers,
    )
    httpx_mock.add_response(
        url=ACCOUNT_URL,
        json={
            "securitiesAccount": {
                "accountNumber": "12345678",
                "currentBalances": {"liquidationValue": balance},
                "positions": positions,
            }
        },
        match_headers=headers,
    )


AAPL = schwab_position("AAPL", 10, 1500.0)
TSLA = schwab_position("TSLA", 5, 1000.0)
MSFT = schwab_position("MSFT", 4, 1600.0)


async def snapshot(unit_of_work, account_id):
    """Account, holdings and activities as currently stored."""
    async with unit_of_work.begin() as repo:
        account = await repo.get_account(account_id)
        holdings = await repo.get_holdings_by_account(account_id)
        activities = await repo.get_activities_by_account(account_id)
    rows = [
        (h.id, h.symbol, h.shares, h.current_price, h.total_value, h.category)
        for h in holdings
    ]
    return account, rows, activities


@pytest.fixture
def build_handler(unit_of_work, test_settings, mock_logger):
    def factory(*, provider_factory=None, sync_lock=None) -> SyncAccountHandler:
        return SyncAccountHandler(
            unit_of_work=unit_of_work,
            provider_factory=provider_factory or ProviderFactory(settings=test_settings),
            credential_manager=CredentialManager(
                unit_of_work=unit_of_work,
                logger=mock_logger,
                refresh_margin_seconds=60,
            ),
            sync_lock=sync_lock or InMemorySyncLock(),
            logger=mock_logger,
        )

    return factory


@pytest_asyncio.fixture
async def schwab_account(unit_of_work):
    async with unit_of_work.begin() as repo:
        return await repo.create_account(
            create_account(
                provider=Provider.SCHWAB,
                access_token="schwab-access",
                refresh_token="schwab-refresh",
                external_account_id="HASH1",
            )
        )


# =============================================================================
# Reconciliation properties
# =============================================================================


class TestReconciliation:
    async def test_repeated_sync_is_idempotent(
        self, build_handler, unit_of_work, schwab_account, httpx_mock
    ):
        handler = build_handler()
        mock_schwab_sync(httpx_mock, [AAPL, TSLA])
        mock_schwab_sync(httpx_mock, [AAPL, TSLA])

        first = await handler.handle(SyncAccount(account_id=schwab_account.id))
        account_after_first, rows_after_first, _ = await snapshot(
            unit_of_work, schwab_account.id
        )
        second = await handler.handle(SyncAccount(account_id=schwab_account.id))
        account_after_second, rows_after_second, _ = await snapshot(
            unit_of_work, schwab_account.id
        )

        assert first.value.created == 2
        assert (second.value.created, second.value.updated, second.value.unchanged) == (0, 0, 2)
        assert rows_after_second == rows_after_first
        assert account_after_second.balance == account_after_first.balance == Decimal("10000.00")

    async def test_removed_position_is_deleted(
        self, build_handler, unit_of_work, schwab_account, httpx_mock
    ):
        handler = build_handler()
        mock_schwab_sync(httpx_mock, [AAPL, TSLA])
        mock_schwab_sync(httpx_mock, [schwab_position("AAPL", 10, 1600.0), MSFT])

        await handler.handle(SyncAccount(account_id=schwab_account.id))
        _, before, _ = await snapshot(unit_of_work, schwab_account.id)
        result = await handler.handle(SyncAccount(account_id=schwab_account.id))
        _, after, _ = await snapshot(unit_of_work, schwab_account.id)

        assert (result.value.created, result.value.updated, result.value.deleted) == (1, 1, 1)
        assert [row[1] for row in after] == ["AAPL", "MSFT"]
        aapl_before = next(row for row in before if row[1] == "AAPL")
        aapl_after = next(row for row in after if row[1] == "AAPL")
        # Updated in place: same row, new price
        assert aapl_after[0] == aapl_before[0]
        assert aapl_after[3] == Decimal("160.00")

    async def test_success_updates_account(
        self, build_handler, unit_of_work, schwab_account, httpx_mock
    ):
        mock_schwab_sync(httpx_mock, [AAPL], balance=2500.25)

        await build_handler().handle(SyncAccount(account_id=schwab_account.id))
        account, _, activities = await snapshot(unit_of_work, schwab_account.id)

        assert account.balance == Decimal("2500.25")
        assert account.is_connected is True
        assert account.last_sync is not None
        assert [a.type for a in activities] == [ActivityType.SYNC]
        assert activities[0].description == "Synced 1 holdings: 1 created, 0 updated, 0 unchanged"


# =============================================================================
# Failure properties
# =============================================================================


class TestFailures:
    async def test_one_activity_per_attempt(
        self, build_handler, unit_of_work, schwab_account, httpx_mock
    ):
        handler = build_handler()
        mock_schwab_sync(httpx_mock, [AAPL])
        httpx_mock.add_response(url=ACCOUNT_NUMBERS_URL, status_code=503)
        mock_schwab_sync(httpx_mock, [AAPL])

        for expected in (1, 2, 3):
            await handler.handle(SyncAccount(account_id=schwab_account.id))
            _, _, activities = await snapshot(unit_of_work, schwab_account.id)
            assert len(activities) == expected

        _, _, activities = await snapshot(unit_of_work, schwab_account.id)
        assert [a.type for a in activities] == [
            ActivityType.SYNC,
            ActivityType.ERROR,
            ActivityType.SYNC,
        ]

    async def test_malformed_position_leaves_holdings_unchanged(
        self, build_handler, unit_of_work, schwab_account, httpx_mock
    ):
        handler = build_handler()
        mock_schwab_sync(httpx_mock, [AAPL, TSLA])
        broken = {"longQuantity": 3, "marketValue": 30.0, "instrument": {"assetType": "EQUITY"}}
        mock_schwab_sync(httpx_mock, [MSFT, broken], balance=99999.0)

        await handler.handle(SyncAccount(account_id=schwab_account.id))
        account_before, rows_before, _ = await snapshot(unit_of_work, schwab_account.id)
        result = await handler.handle(SyncAccount(account_id=schwab_account.id))
        account_after, rows_after, activities = await snapshot(unit_of_work, schwab_account.id)

        assert isinstance(result.error, ProviderInvalidResponseError)
        assert rows_after == rows_before
        assert account_after.balance == account_before.balance
        assert activities[0].type == ActivityType.ERROR

    @pytest.mark.parametrize(
        ("status", "headers", "expected"),
        [
            (503, None, ProviderUnavailableError),
            (429, {"Retry-After": "60"}, ProviderRateLimitError),
        ],
    )
    async def test_transient_failure_keeps_credentials_and_connection(
        self, build_handler, unit_of_work, schwab_account, httpx_mock, status, headers, expected
    ):
        httpx_mock.add_response(url=ACCOUNT_NUMBERS_URL, status_code=status, headers=headers)

        result = await build_handler().handle(SyncAccount(account_id=schwab_account.id))
        account, rows, activities = await snapshot(unit_of_work, schwab_account.id)

        assert isinstance(result.error, expected)
        assert account.is_connected is True
        assert account.access_token == "schwab-access"
        assert account.refresh_token == "schwab-refresh"
        assert account.last_sync is None
        assert rows == []
        assert [a.type for a in activities] == [ActivityType.ERROR]

    async def test_rejected_token_disconnects(
        self, build_handler, unit_of_work, schwab_account, httpx_mock
    ):
        httpx_mock.add_response(url=ACCOUNT_NUMBERS_URL, status_code=401)

        result = await build_handler().handle(SyncAccount(account_id=schwab_account.id))
        account, _, activities = await snapshot(unit_of_work, schwab_account.id)

        assert isinstance(result.error, ProviderAuthenticationError)
        assert account.is_connected is False
        # Every account update stamps last_sync
        assert account.last_sync is not None
        assert len(activities) == 1


# =============================================================================
# Credential refresh
# =============================================================================


class TestExpiredToken:
    async def test_refreshed_once_and_new_token_used(
        self, build_handler, unit_of_work, httpx_mock
    ):
        async with unit_of_work.begin() as repo:
            account = await repo.create_account(
                create_account(
                    provider=Provider.SCHWAB,
                    access_token="stale-access",
                    refresh_token="old-refresh",
                    token_expiry=datetime.now(UTC) - timedelta(minutes=5),
                    external_account_id="HASH1",
                )
            )
        httpx_mock.add_response(
            method="POST",
            url=TOKEN_URL,
            json={"access_token": "new-access", "refresh_token": "new-refresh", "expires_in": 1800},
        )
        mock_schwab_sync(httpx_mock, [AAPL], access_token="new-access")

        result = await build_handler().handle(SyncAccount(account_id=account.id))
        stored, _, _ = await snapshot(unit_of_work, account.id)

        assert isinstance(result, Success)
        assert len(httpx_mock.get_requests(url=TOKEN_URL)) == 1
        assert stored.access_token == "new-access"
        assert stored.refresh_token == "new-refresh"
        assert stored.token_expiry > datetime.now(UTC)


# =============================================================================
# Concurrency
# =============================================================================


def fake_schwab_provider(fetch_accounts) -> MagicMock:
    """Provider double whose fetch_accounts is the given coroutine function."""
    provider = MagicMock()
    provider.slug = "schwab"
    provider.supports_refresh = True
    provider.probe = AsyncMock(return_value=Success(value=None))
    provider.fetch_accounts = AsyncMock(side_effect=fetch_accounts)
    provider.resolve_account_ref = MagicMock(return_value=Success(value="HASH1"))
    provider.fetch_positions = AsyncMock(
        return_value=Success(value=ProviderPositionList(provider_account_ref="HASH1", payload={}))
    )
    provider.normalize = MagicMock(
        return_value=Success(
            value=NormalizedPortfolio(
                provider_account_ref="HASH1",
                balance=Decimal("100.00"),
                holdings=[
                    NormalizedHolding(
                        symbol="AAPL",
                        name="Apple",
                        shares=Decimal("1.0000"),
                        current_price=Decimal("100.00"),
                        total_value=Decimal("100.00"),
                        category=HoldingCategory.STOCKS,
                    )
                ],
            )
        )
    )
    return provider


def factory_for(provider: MagicMock) -> MagicMock:
    factory = MagicMock()
    factory.get_provider = MagicMock(return_value=Success(value=provider))
    return factory


class TestConcurrentSync:
    async def test_overlapping_sync_rejected(self, build_handler, unit_of_work, schwab_account):
        gate = asyncio.Event()
        fetch_started = asyncio.Event()

        async def slow_fetch_accounts(credentials):
            fetch_started.set()
            await gate.wait()
            return Success(value=[{"hashValue": "HASH1"}])

        provider = fake_schwab_provider(slow_fetch_accounts)
        handler = build_handler(provider_factory=factory_for(provider))

        first = asyncio.create_task(handler.handle(SyncAccount(account_id=schwab_account.id)))
        await fetch_started.wait()
        second = await handler.handle(SyncAccount(account_id=schwab_account.id))
        gate.set()
        first_result = await first

        _, rows, activities = await snapshot(unit_of_work, schwab_account.id)
        assert isinstance(second.error, ConflictError)
        assert isinstance(first_result, Success)
        assert provider.fetch_accounts.await_count == 1
        assert [row[1] for row in rows] == ["AAPL"]
        assert sorted(a.type.value for a in activities) == ["error", "sync"]

    async def test_delete_rejected_while_syncing(
        self, build_handler, unit_of_work, schwab_account, mock_logger
    ):
        gate = asyncio.Event()
        fetch_started = asyncio.Event()

        async def slow_fetch_accounts(credentials):
            fetch_started.set()
            await gate.wait()
            return Success(value=[{"hashValue": "HASH1"}])

        sync_lock = InMemorySyncLock()
        factory = factory_for(fake_schwab_provider(slow_fetch_accounts))
        handler = build_handler(provider_factory=factory, sync_lock=sync_lock)
        delete_handler = DeleteAccountHandler(
            unit_of_work=unit_of_work,
            provider_factory=factory,
            sync_lock=sync_lock,
            logger=mock_logger,
        )

        sync = asyncio.create_task(handler.handle(SyncAccount(account_id=schwab_account.id)))
        await fetch_started.wait()
        rejected = await delete_handler.handle(DeleteAccount(account_id=schwab_account.id))
        gate.set()
        sync_result = await sync

        assert isinstance(rejected.error, ConflictError)
        assert isinstance(sync_result, Success)
        account, rows, _ = await snapshot(unit_of_work, schwab_account.id)
        assert account is not None
        assert [row[1] for row in rows] == ["AAPL"]

    async def test_account_removed_mid_sync_returns_failure(
        self, build_handler, unit_of_work, schwab_account, mock_logger
    ):
        async def fetch_after_delete(credentials):
            # Removal that bypasses the sync lock
            async with unit_of_work.begin() as repo:
                await repo.delete_account(schwab_account.id)
            return Success(value=[{"hashValue": "HASH1"}])

        provider = fake_schwab_provider(fetch_after_delete)
        handler = build_handler(provider_factory=factory_for(provider))

        result = await handler.handle(SyncAccount(account_id=schwab_account.id))

        assert isinstance(result, Failure)
        assert isinstance(result.error, ReconciliationError)
        account, rows, activities = await snapshot(unit_of_work, schwab_account.id)
        assert account is None
        assert rows == []
        assert activities == []
        logged = [call.args[0] for call in mock_logger.error.call_args_list]
        assert "sync_failure_record_failed" in logged


# =============================================================================
# Classification
# =============================================================================


class TestCategoryDefaults:
    async def test_etrade_money_market_and_unknown_types(
        self, build_handler, unit_of_work, httpx_mock
    ):
        async with unit_of_work.begin() as repo:
            account = await repo.create_account(
                create_account(
                    provider=Provider.ETRADE,
                    access_token="etrade-access",
                    access_token_secret="etrade-secret",
                    refresh_token=None,
                    token_expiry=None,
                    account_id_key="KEY1",
                )
            )

        def etrade_position(symbol: str, security_type: str) -> dict:
            return {
                "Product": {"symbol": symbol, "securityType": security_type},
                "quantity": 10,
                "marketValue": 100.0,
                "Quick": {"lastTrade": 10.0},
            }

        httpx_mock.add_response(
            url=f"{ETRADE_URL}/v1/accounts/list",
            json={
                "AccountListResponse": {
                    "Accounts": {"Account": [{"accountId": "1", "accountIdKey": "KEY1"}]}
                }
            },
        )
        httpx_mock.add_response(
            url=f"{ETRADE_URL}/v1/accounts/KEY1/balance?instType=BROKERAGE&realTime=true",
            json={"BalanceResponse": {"Computed": {"RealTimeValues": {"totalAccountValue": 200}}}},
        )
        httpx_mock.add_response(
            url=f"{ETRADE_URL}/v1/accounts/KEY1/portfolio",
            json={
                "PortfolioResponse": {
                    "AccountPortfolio": [
                        {
                            "Position": [
                                etrade_position("VMFXX", "mmf"),
                                etrade_position("WEIRD", "WARRANT_XYZ"),
                            ]
                        }
                    ]
                }
            },
        )

        result = await build_handler().handle(SyncAccount(account_id=account.id))
        _, rows, _ = await snapshot(unit_of_work, account.id)

        assert isinstance(result, Success)
        assert {row[1]: row[5] for row in rows} == {
            "VMFXX": HoldingCategory.CASH,
            "WEIRD": HoldingCategory.STOCKS,
        }
