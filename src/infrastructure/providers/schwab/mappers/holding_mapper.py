"""Schwab holding (position) mapper.

Converts Schwab Trader API positions into NormalizedHolding rows.

Schwab Position Response Structure (nested in account response):
    {
        "securitiesAccount": {
            "positions": [
                {
                    "longQuantity": 100.0,
                    "shortQuantity": 0.0,
                    "marketValue": 15500.00,
                    "currentDayProfitLossPercentage": 0.81,
                    "instrument": {
                        "assetType": "EQUITY",
                        "symbol": "AAPL",
                        "description": "APPLE INC"
                    }
                }
            ]
        }
    }

Only long positions are synced. The price is derived from market value
because Schwab does not report a per-share price on the position.

Reference:
    - Schwab Trader API: https://developer.schwab.com
"""

from decimal import Decimal
from typing import Any

import structlog

from src.domain.enums.holding_category import HoldingCategory
from src.domain.protocols.provider_protocol import NormalizedHolding
from src.infrastructure.providers.normalization import (
    PayloadError,
    build_holding,
    classify_security_type,
    parse_decimal,
    parse_optional_decimal,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# Asset Type Mapping
# =============================================================================

SCHWAB_CATEGORY_MAP: dict[str, HoldingCategory] = {
    "equity": HoldingCategory.STOCKS,
    "stock": HoldingCategory.STOCKS,
    "etf": HoldingCategory.ETFS,
    "mutual_fund": HoldingCategory.MUTUAL_FUNDS,
    "collective_investment": HoldingCategory.MUTUAL_FUNDS,
    "fixed_income": HoldingCategory.BONDS,
    "bond": HoldingCategory.BONDS,
    "cash_equivalent": HoldingCategory.CASH,
    "money_market": HoldingCategory.CASH,
    "currency": HoldingCategory.CASH,
    "crypto": HoldingCategory.CRYPTO,
}

SCHWAB_DEFAULT_CATEGORY = HoldingCategory.STOCKS


class SchwabHoldingMapper:
    """Mapper for converting Schwab positions to NormalizedHolding.

    Thread-safe: No mutable state, can be shared across requests.

    Example:
        >>> mapper = SchwabHoldingMapper()
        >>> holdings = mapper.map_holdings_from_account(account_data)
    """

    def map_holdings_from_account(
        self,
        account_data: dict[str, Any],
    ) -> list[NormalizedHolding]:
        """Extract and map holdings from a full account response.

        Raises:
            PayloadError: Any long position is malformed.
        """
        securities_account = account_data.get("securitiesAccount") or {}
        positions = securities_account.get("positions") or []

        if not isinstance(positions, list):
            raise PayloadError("securitiesAccount.positions", type(positions).__name__)

        if not positions:
            logger.debug("schwab_account_no_positions")
            return []

        holdings: list[NormalizedHolding] = []
        for position in positions:
            holding = self.map_holding(position)
            if holding is not None:
                holdings.append(holding)
        return holdings

    def map_holding(self, data: dict[str, Any]) -> NormalizedHolding | None:
        """Map one position.

        Returns:
            NormalizedHolding, or None when longQuantity is zero or negative
            (flat or short positions).

        Raises:
            PayloadError: Position is malformed, including a missing or
                non-numeric longQuantity.
        """
        long_qty = parse_decimal(data.get("longQuantity"), "longQuantity")
        if long_qty <= 0:
            return None

        instrument = data.get("instrument")
        if not isinstance(instrument, dict):
            raise PayloadError("instrument", instrument)

        symbol = instrument.get("symbol")
        if not symbol:
            raise PayloadError("instrument.symbol", symbol)

        return build_holding(
            symbol=symbol,
            name=instrument.get("description"),
            shares=long_qty,
            current_price=None,
            total_value=parse_decimal(data.get("marketValue"), f"{symbol}.marketValue"),
            category=classify_security_type(
                instrument.get("assetType"),
                SCHWAB_CATEGORY_MAP,
                SCHWAB_DEFAULT_CATEGORY,
            ),
            change_percent=parse_optional_decimal(
                data.get("currentDayProfitLossPercentage"),
                f"{symbol}.currentDayProfitLossPercentage",
            )
            or Decimal("0"),
        )
