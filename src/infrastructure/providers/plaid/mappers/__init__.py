"""Plaid data mappers (JSON -> balance / NormalizedHolding)."""

from src.infrastructure.providers.plaid.mappers.account_mapper import PlaidAccountMapper
from src.infrastructure.providers.plaid.mappers.holding_mapper import (
    PLAID_CATEGORY_MAP,
    PlaidHoldingMapper,
)

__all__ = ["PLAID_CATEGORY_MAP", "PlaidAccountMapper", "PlaidHoldingMapper"]
