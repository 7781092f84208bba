"""Plaid API client."""

from src.infrastructure.providers.plaid.api.plaid_api import PlaidAPI, map_plaid_error

__all__ = ["PlaidAPI", "map_plaid_error"]
