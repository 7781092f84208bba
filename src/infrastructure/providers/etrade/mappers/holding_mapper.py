"""E*TRADE holding (position) mapper.

E*TRADE Portfolio Response Structure:
    {
        "PortfolioResponse": {
            "AccountPortfolio": [
                {
                    "Position": [
                        {
                            "symbolDescription": "AAPL",
                            "quantity": 10,
                            "marketValue": 1901.2,
                            "daysGainPct": 0.5,
                            "Product": {"symbol": "AAPL", "securityType": "EQ"},
                            "Quick": {"lastTrade": 190.12, "changePct": 0.53}
                        }
                    ]
                }
            ]
        }
    }

Positions are collected from every AccountPortfolio page in the document.
"""

from decimal import Decimal
from typing import Any

from src.domain.enums.holding_category import HoldingCategory
from src.domain.protocols.provider_protocol import NormalizedHolding
from src.infrastructure.providers.etrade.mappers.account_mapper import as_list
from src.infrastructure.providers.normalization import (
    PayloadError,
    build_holding,
    classify_security_type,
    parse_decimal,
    parse_optional_decimal,
)

ETRADE_CATEGORY_MAP: dict[str, HoldingCategory] = {
    "eq": HoldingCategory.STOCKS,
    "stock": HoldingCategory.STOCKS,
    "etf": HoldingCategory.ETFS,
    "mf": HoldingCategory.MUTUAL_FUNDS,
    "mmf": HoldingCategory.CASH,
    "money market": HoldingCategory.CASH,
    "bond": HoldingCategory.BONDS,
    "crypto": HoldingCategory.CRYPTO,
    "optn": HoldingCategory.OTHER,
    "option": HoldingCategory.OTHER,
}

ETRADE_DEFAULT_CATEGORY = HoldingCategory.STOCKS


class ETradeHoldingMapper:
    """Mapper for converting E*TRADE positions to NormalizedHolding."""

    def map_portfolio(self, document: dict[str, Any] | None) -> list[NormalizedHolding]:
        """Map every position of a PortfolioResponse document.

        Args:
            document: Portfolio document, or None when the account is empty.

        Raises:
            PayloadError: Any position is malformed.
        """
        if document is None:
            return []

        response = document.get("PortfolioResponse")
        if not isinstance(response, dict):
            raise PayloadError("PortfolioResponse", type(response).__name__)

        holdings: list[NormalizedHolding] = []
        for page in as_list(response.get("AccountPortfolio")):
            for position in as_list(page.get("Position")):
                holding = self.map_holding(position)
                if holding is not None:
                    holdings.append(holding)
        return holdings

    def map_holding(self, data: dict[str, Any]) -> NormalizedHolding | None:
        """Map one position. Returns None for zero-quantity rows.

        Raises:
            PayloadError: Position is malformed.
        """
        product = data.get("Product") or {}
        symbol = product.get("symbol") or data.get("symbolDescription")
        if not symbol:
            raise PayloadError("Product.symbol", symbol)

        shares = parse_decimal(data.get("quantity"), f"{symbol}.quantity")
        if shares == 0:
            return None

        quote = data.get("Quick") or data.get("Complete") or {}
        change = parse_optional_decimal(quote.get("changePct"), f"{symbol}.changePct")
        if change is None:
            change = parse_optional_decimal(data.get("daysGainPct"), f"{symbol}.daysGainPct")

        return build_holding(
            symbol=symbol,
            name=product.get("companyName") or data.get("symbolDescription"),
            shares=shares,
            current_price=parse_optional_decimal(
                quote.get("lastTrade"), f"{symbol}.lastTrade"
            ),
            total_value=parse_optional_decimal(
                data.get("marketValue"), f"{symbol}.marketValue"
            ),
            category=classify_security_type(
                product.get("securityType"),
                ETRADE_CATEGORY_MAP,
                ETRADE_DEFAULT_CATEGORY,
            ),
            change_percent=change or Decimal("0"),
        )
