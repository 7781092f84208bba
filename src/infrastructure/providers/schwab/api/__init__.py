"""Schwab API clients for external API communication.

Clients return raw JSON (dict) - mapping to canonical types happens in mappers/.
"""

from src.infrastructure.providers.schwab.api.accounts_api import SchwabAccountsAPI
from src.infrastructure.providers.schwab.api.oauth_api import SchwabOAuthAPI

__all__ = ["SchwabAccountsAPI", "SchwabOAuthAPI"]
