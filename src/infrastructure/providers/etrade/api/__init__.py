"""E*TRADE API clients (OAuth 1.0a signed HTTP)."""

from src.infrastructure.providers.etrade.api.accounts_api import ETradeAccountsAPI
from src.infrastructure.providers.etrade.api.oauth_api import ETradeOAuthAPI

__all__ = ["ETradeAccountsAPI", "ETradeOAuthAPI"]
