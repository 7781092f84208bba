"""E*TRADE provider package.

Implements ProviderProtocol for E*TRADE (OAuth 1.0a, HMAC-SHA1).

Usage:
    from src.infrastructure.providers.etrade import ETradeProvider

    provider = ETradeProvider(settings=settings)
"""

from src.infrastructure.providers.etrade.etrade_provider import ETradeProvider

__all__ = ["ETradeProvider"]
