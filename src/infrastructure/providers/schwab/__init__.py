"""Schwab provider package.

Implements ProviderProtocol for Charles Schwab (OAuth 2.0).

Architecture:
    schwab_provider.py - Main provider implementing ProviderProtocol
    api/ - HTTP clients for Schwab OAuth and Trader API endpoints
    mappers/ - Data transformers (JSON -> NormalizedHolding / balance)

Usage:
    from src.infrastructure.providers.schwab import SchwabProvider

    provider = SchwabProvider(settings=settings)
    result = await provider.fetch_accounts(credentials)
"""

from src.infrastructure.providers.schwab.schwab_provider import SchwabProvider

__all__ = ["SchwabProvider"]
