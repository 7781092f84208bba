"""Pytest configuration and shared fixtures.

Integration tests run against a throwaway SQLite database per test (via
aiosqlite), so no external services are needed. Provider HTTP traffic is
mocked with pytest-httpx.
"""

import asyncio
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
import pytest_asyncio
from uuid_extensions import uuid7

from src.core.config import Settings
from src.domain.entities import Account
from src.domain.enums import AccountType, Provider

TEST_ENCRYPTION_KEY = "k" * 32

_DEFAULT_EXPIRY = object()


def create_account(
    *,
    provider: Provider = Provider.SCHWAB,
    name: str = "Individual Brokerage",
    account_type: AccountType = AccountType.INDIVIDUAL,
    balance: Decimal = Decimal("0.00"),
    is_connected: bool = True,
    access_token: str | None = "access-token",
    access_token_secret: str | None = None,
    refresh_token: str | None = "refresh-token",
    token_expiry: datetime | None | object = _DEFAULT_EXPIRY,
    account_id_key: str | None = None,
    external_account_id: str | None = None,
    last_sync: datetime | None = None,
) -> Account:
    """Helper to create an Account entity for testing.

    token_expiry defaults to one hour from now; pass None for no expiry.
    """
    if token_expiry is _DEFAULT_EXPIRY:
        token_expiry = datetime.now(UTC) + timedelta(hours=1)

    return Account(
        id=uuid7(),
        name=name,
        provider=provider,
        account_type=account_type,
        balance=balance,
        is_connected=is_connected,
        last_sync=last_sync,
        access_token=access_token,
        access_token_secret=access_token_secret,
        refresh_token=refresh_token,
        token_expiry=token_expiry,  # type: ignore[arg-type]
        account_id_key=account_id_key,
        external_account_id=external_account_id,
    )


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with real database or HTTP mocks"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions."""
    for item in items:
        if asyncio.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)


# =============================================================================
# Settings and Infrastructure
# =============================================================================


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with every provider configured and a file-backed SQLite db."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path}/folio.db",
        encryption_key=TEST_ENCRYPTION_KEY,
        etrade_consumer_key="etrade-consumer-key",
        etrade_consumer_secret="etrade-consumer-secret",
        etrade_sandbox=True,
        schwab_api_key="schwab-client-id",
        schwab_api_secret="schwab-client-secret",
        schwab_redirect_uri="https://127.0.0.1:8182/callback",
        plaid_client_id="plaid-client-id",
        plaid_secret="plaid-secret",
        provider_timeout_seconds=5.0,
    )


@pytest.fixture
def encryption_service():
    """AES-256-GCM service with the test key."""
    from src.infrastructure.providers.encryption_service import EncryptionService

    return EncryptionService.create(TEST_ENCRYPTION_KEY).value


@pytest_asyncio.fixture
async def test_database(test_settings):
    """Fresh database with all tables created, disposed after the test."""
    from src.infrastructure.persistence.database import Database

    db = Database(database_url=test_settings.database_url)
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
def unit_of_work(test_database, encryption_service):
    """Portfolio unit of work over the test database."""
    from src.infrastructure.persistence.unit_of_work import SqlAlchemyPortfolioUnitOfWork

    return SqlAlchemyPortfolioUnitOfWork(test_database, encryption_service)


# =============================================================================
# Reusable Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger():
    """Provide a mock logger for testing.

    bind() returns the same mock so bound calls can be asserted directly.
    """
    logger = Mock()
    logger.info = Mock()
    logger.debug = Mock()
    logger.error = Mock()
    logger.warning = Mock()
    logger.bind = Mock(return_value=logger)
    return logger


@pytest.fixture
def mock_async_context_manager():
    """Factory for creating mock async context managers.

    Useful for mocking unit-of-work transactions.
    """

    def factory(return_value=None):
        mock = MagicMock()
        mock.__aenter__ = AsyncMock(return_value=return_value or mock)
        mock.__aexit__ = AsyncMock(return_value=None)
        return mock

    return factory


@pytest.fixture
def mock_repo():
    """AsyncMock portfolio repository."""
    repo = AsyncMock()
    repo.get_account = AsyncMock(return_value=None)
    repo.list_accounts = AsyncMock(return_value=[])
    repo.get_holdings_by_account = AsyncMock(return_value=[])
    repo.get_activities_by_account = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_unit_of_work(mock_repo, mock_async_context_manager):
    """Unit of work whose begin() yields mock_repo."""
    uow = MagicMock()
    uow.begin = Mock(side_effect=lambda: mock_async_context_manager(mock_repo))
    return uow
