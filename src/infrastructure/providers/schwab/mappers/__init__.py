"""Schwab data mappers for transforming API responses to canonical types.

Mappers contain Schwab-specific knowledge (field names, type mappings)
but produce provider-agnostic NormalizedHolding rows.
"""

from src.infrastructure.providers.schwab.mappers.account_mapper import (
    SchwabAccountMapper,
)
from src.infrastructure.providers.schwab.mappers.holding_mapper import (
    SCHWAB_CATEGORY_MAP,
    SchwabHoldingMapper,
)

__all__ = ["SCHWAB_CATEGORY_MAP", "SchwabAccountMapper", "SchwabHoldingMapper"]
