"""Integration tests for the E*TRADE HTTP clients and ETradeProvider.

Tests cover:
- OAuth 1.0a handshake (request token, access token, revoke)
- Signed account requests (signature covers query parameters)
- 204 No Content portfolio as an empty account
- Balance and portfolio normalization through the provider

Architecture:
- Uses pytest-httpx for HTTP mocking against the sandbox host
- Provider built from the shared test_settings fixture (etrade_sandbox=True)
"""

from decimal import Decimal
from urllib.parse import parse_qs, unquote

import pytest
from pytest_httpx import HTTPXMock

from src.core.result import Success
from src.domain.enums import HoldingCategory
from src.domain.errors import ProviderAuthenticationError, ProviderInvalidResponseError
from src.domain.protocols.provider_protocol import AuthorizationGrant
from src.domain.value_objects.provider_credentials import ProviderCredentials
from src.infrastructure.providers.etrade.etrade_provider import ETradeProvider
from src.infrastructure.providers.etrade.oauth1_signer import OAuth1Signer

BASE_URL = "https://apisb.etrade.com"
ACCOUNT_KEY = "JIdOIAcSpwR1Jva7RQBraQ"
BALANCE_URL = f"{BASE_URL}/v1/accounts/{ACCOUNT_KEY}/balance?instType=BROKERAGE&realTime=true"
PORTFOLIO_URL = f"{BASE_URL}/v1/accounts/{ACCOUNT_KEY}/portfolio"
CREDENTIALS = ProviderCredentials(access_token="access", access_token_secret="access-secret")


def parse_oauth_header(header: str) -> dict[str, str]:
    """Split an ``OAuth k="v",...`` header into decoded fields."""
    assert header.startswith("OAuth ")
    fields = {}
    for part in header[len("OAuth ") :].split(","):
        key, _, value = part.partition("=")
        fields[unquote(key)] = unquote(value.strip('"'))
    return fields


def account_list_document(*accounts: dict) -> dict:
    return {"AccountListResponse": {"Accounts": {"Account": list(accounts)}}}


def balance_document(total: float = 25000.50) -> dict:
    return {"BalanceResponse": {"Computed": {"RealTimeValues": {"totalAccountValue": total}}}}


def portfolio_document(*positions: dict) -> dict:
    return {"PortfolioResponse": {"AccountPortfolio": [{"Position": list(positions)}]}}


def position(symbol: str, quantity: float, security_type: str = "EQ", **extra) -> dict:
    data = {
        "Product": {"symbol": symbol, "securityType": security_type},
        "symbolDescription": symbol,
        "quantity": quantity,
        "marketValue": quantity * 10.0,
        "Quick": {"lastTrade": 10.0, "changePct": 1.25},
    }
    data.update(extra)
    return data


@pytest.fixture
def provider(test_settings) -> ETradeProvider:
    return ETradeProvider(settings=test_settings)


# =============================================================================
# OAuth handshake
# =============================================================================


class TestAuthorization:
    async def test_start_authorization(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="GET",
            url=f"{BASE_URL}/oauth/request_token",
            text="oauth_token=req%2Btoken&oauth_token_secret=req-secret&oauth_callback_confirmed=true",
        )

        result = await provider.start_authorization()

        assert isinstance(result, Success)
        assert result.value.request_token == "req+token"
        assert result.value.request_token_secret == "req-secret"
        assert result.value.authorization_url == (
            "https://us.etrade.com/e/t/etws/authorize"
            "?key=etrade-consumer-key&token=req%2Btoken"
        )
        oauth = parse_oauth_header(httpx_mock.get_request().headers["Authorization"])
        assert oauth["oauth_callback"] == "oob"
        assert oauth["oauth_consumer_key"] == "etrade-consumer-key"
        assert "oauth_token" not in oauth

    async def test_complete_authorization(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url=f"{BASE_URL}/oauth/access_token",
            text="oauth_token=access&oauth_token_secret=access-secret",
        )

        result = await provider.complete_authorization(
            AuthorizationGrant(code="VERIFIER", request_token="rt", request_token_secret="rts")
        )

        assert result == Success(value=CREDENTIALS)
        oauth = parse_oauth_header(httpx_mock.get_request().headers["Authorization"])
        assert oauth["oauth_verifier"] == "VERIFIER"
        assert oauth["oauth_token"] == "rt"

    async def test_complete_without_request_token_pair(self, provider):
        result = await provider.complete_authorization(AuthorizationGrant(code="VERIFIER"))

        assert isinstance(result.error, ProviderAuthenticationError)

    async def test_rejected_verifier(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url=f"{BASE_URL}/oauth/access_token",
            status_code=401,
            text="oauth_problem=token_rejected",
        )

        result = await provider.complete_authorization(
            AuthorizationGrant(code="BAD", request_token="rt", request_token_secret="rts")
        )

        assert isinstance(result.error, ProviderAuthenticationError)

    async def test_incomplete_token_response(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE_URL}/oauth/request_token", text="oauth_token=only")

        result = await provider.start_authorization()

        assert isinstance(result.error, ProviderInvalidResponseError)

    async def test_refresh_always_requires_relink(self, provider):
        result = await provider.refresh(CREDENTIALS)

        assert isinstance(result.error, ProviderAuthenticationError)
        assert result.error.is_token_expired is True

    async def test_revoke(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url=f"{BASE_URL}/oauth/revoke_access_token", text="Revoked Access Token"
        )

        result = await provider.revoke(CREDENTIALS)

        assert result == Success(value=None)


# =============================================================================
# Account data
# =============================================================================


class TestAccountData:
    async def test_signed_balance_request(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=BALANCE_URL, json=balance_document())
        httpx_mock.add_response(url=PORTFOLIO_URL, json=portfolio_document())

        await provider.fetch_positions(CREDENTIALS, ACCOUNT_KEY)

        balance_request = httpx_mock.get_requests()[0]
        oauth = parse_oauth_header(balance_request.headers["Authorization"])
        signer = OAuth1Signer(
            consumer_key="etrade-consumer-key", consumer_secret="etrade-consumer-secret"
        )
        signed = {k: v for k, v in oauth.items() if k not in ("realm", "oauth_signature")}
        signed.update({"instType": "BROKERAGE", "realTime": "true"})
        expected = signer.sign(
            "GET",
            f"{BASE_URL}/v1/accounts/{ACCOUNT_KEY}/balance",
            signed,
            "access-secret",
        )
        assert oauth["oauth_signature"] == expected
        assert oauth["oauth_token"] == "access"

    async def test_fetch_and_normalize(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url=f"{BASE_URL}/v1/accounts/list",
            json=account_list_document(
                {"accountId": "1", "accountIdKey": "CLOSED-KEY", "accountStatus": "CLOSED"},
                {"accountId": "84010429", "accountIdKey": ACCOUNT_KEY, "accountStatus": "ACTIVE"},
            ),
        )
        httpx_mock.add_response(url=BALANCE_URL, json=balance_document())
        httpx_mock.add_response(
            url=PORTFOLIO_URL,
            json=portfolio_document(
                position("AAPL", 10),
                position("SPY", 2, security_type="ETF"),
                position("VMFXX", 100, security_type="MMF"),
                position("ZERO", 0),
            ),
        )

        accounts = await provider.fetch_accounts(CREDENTIALS)
        ref = provider.resolve_account_ref(accounts.value, None)
        positions = await provider.fetch_positions(CREDENTIALS, ref.value)
        portfolio = provider.normalize(accounts.value, positions.value)

        assert ref == Success(value=ACCOUNT_KEY)
        assert portfolio.value.balance == Decimal("25000.50")
        assert portfolio.value.account_id_key == ACCOUNT_KEY
        categories = {h.symbol: h.category for h in portfolio.value.holdings}
        assert categories == {
            "AAPL": HoldingCategory.STOCKS,
            "SPY": HoldingCategory.ETFS,
            "VMFXX": HoldingCategory.CASH,
        }
        aapl = portfolio.value.holdings[0]
        assert (aapl.current_price, aapl.total_value) == (Decimal("10.00"), Decimal("100.00"))
        assert aapl.change_percent == Decimal("1.25")

    async def test_empty_portfolio_returns_no_holdings(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=BALANCE_URL, json=balance_document(1000.0))
        httpx_mock.add_response(url=PORTFOLIO_URL, status_code=204)

        positions = await provider.fetch_positions(CREDENTIALS, ACCOUNT_KEY)
        portfolio = provider.normalize([], positions.value)

        assert portfolio.value.holdings == []
        assert portfolio.value.balance == Decimal("1000.00")

    async def test_single_account_rendered_as_object(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url=f"{BASE_URL}/v1/accounts/list",
            json={
                "AccountListResponse": {
                    "Accounts": {"Account": {"accountId": "9", "accountIdKey": "ONLY"}}
                }
            },
        )

        accounts = await provider.fetch_accounts(CREDENTIALS)

        assert provider.resolve_account_ref(accounts.value, "9") == Success(value="ONLY")

    async def test_expired_access_token(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{BASE_URL}/v1/accounts/list", status_code=401)

        result = await provider.fetch_accounts(CREDENTIALS)

        assert isinstance(result.error, ProviderAuthenticationError)
        assert result.error.is_token_expired is True

    async def test_missing_token_secret_makes_no_request(self, provider):
        result = await provider.fetch_accounts(ProviderCredentials(access_token="access"))

        assert isinstance(result.error, ProviderAuthenticationError)

    async def test_malformed_balance_is_schema_error(self, provider, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=BALANCE_URL, json={"BalanceResponse": {}})
        httpx_mock.add_response(url=PORTFOLIO_URL, json=portfolio_document())

        positions = await provider.fetch_positions(CREDENTIALS, ACCOUNT_KEY)
        result = provider.normalize([], positions.value)

        assert isinstance(result.error, ProviderInvalidResponseError)
