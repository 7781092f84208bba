"""E*TRADE data mappers (JSON -> balance / NormalizedHolding)."""

from src.infrastructure.providers.etrade.mappers.account_mapper import (
    ETradeAccountMapper,
)
from src.infrastructure.providers.etrade.mappers.holding_mapper import (
    ETRADE_CATEGORY_MAP,
    ETradeHoldingMapper,
)

__all__ = ["ETRADE_CATEGORY_MAP", "ETradeAccountMapper", "ETradeHoldingMapper"]
