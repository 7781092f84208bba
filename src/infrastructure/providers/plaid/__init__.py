"""Plaid provider package.

Implements ProviderProtocol for Plaid (link-token exchange, aggregator).

Usage:
    from src.infrastructure.providers.plaid import PlaidProvider

    provider = PlaidProvider(settings=settings)
"""

from src.infrastructure.providers.plaid.plaid_provider import PlaidProvider

__all__ = ["PlaidProvider"]
