"""Plaid holding mapper.

Plaid Investments Holdings Response:
    {
        "holdings": [
            {
                "account_id": "...",
                "security_id": "d6ePmbPxgWCWmMVv66q9iPV94n91vMtov5Are",
                "quantity": 0.01,
                "institution_price": 0.011,
                "institution_value": 0.01
            }
        ],
        "securities": [
            {
                "security_id": "d6ePmbPxgWCWmMVv66q9iPV94n91vMtov5Are",
                "ticker_symbol": "ACHN",
                "name": "Achillion Pharmaceuticals Inc.",
                "type": "equity",
                "close_price": 0.011
            }
        ]
    }

Plaid is an aggregator: security types arrive from many institutions, so
unrecognized types fall back to "other" rather than "stocks".
"""

from typing import Any

from src.domain.enums.holding_category import HoldingCategory
from src.domain.protocols.provider_protocol import NormalizedHolding
from src.infrastructure.providers.normalization import (
    PayloadError,
    build_holding,
    classify_security_type,
    parse_decimal,
    parse_optional_decimal,
)

PLAID_CATEGORY_MAP: dict[str, HoldingCategory] = {
    "equity": HoldingCategory.STOCKS,
    "stock": HoldingCategory.STOCKS,
    "etf": HoldingCategory.ETFS,
    "mutual fund": HoldingCategory.MUTUAL_FUNDS,
    "fixed income": HoldingCategory.BONDS,
    "bond": HoldingCategory.BONDS,
    "cash": HoldingCategory.CASH,
    "money market": HoldingCategory.CASH,
    "mmf": HoldingCategory.CASH,
    "crypto": HoldingCategory.CRYPTO,
}

PLAID_DEFAULT_CATEGORY = HoldingCategory.OTHER


class PlaidHoldingMapper:
    """Mapper for converting Plaid holdings to NormalizedHolding."""

    def map_holdings(
        self,
        document: dict[str, Any],
        account_id: str,
    ) -> list[NormalizedHolding]:
        """Map the holdings of account_id, joined to their securities.

        Raises:
            PayloadError: A holding references an unknown security or has
                malformed numbers.
        """
        securities = {
            s["security_id"]: s
            for s in document.get("securities") or []
            if isinstance(s, dict) and s.get("security_id")
        }

        holdings: list[NormalizedHolding] = []
        for data in document.get("holdings") or []:
            if data.get("account_id") != account_id:
                continue
            holding = self.map_holding(data, securities)
            if holding is not None:
                holdings.append(holding)
        return holdings

    def map_holding(
        self,
        data: dict[str, Any],
        securities: dict[str, dict[str, Any]],
    ) -> NormalizedHolding | None:
        """Map one holding. Returns None for non-positive quantities."""
        security_id = data.get("security_id")
        security = securities.get(security_id) if security_id else None
        if security is None:
            raise PayloadError("holdings.security_id", security_id)

        symbol = security.get("ticker_symbol") or security_id
        shares = parse_decimal(data.get("quantity"), f"{symbol}.quantity")
        if shares <= 0:
            return None

        price = parse_optional_decimal(
            data.get("institution_price"), f"{symbol}.institution_price"
        )
        if price is None:
            price = parse_optional_decimal(security.get("close_price"), f"{symbol}.close_price")

        return build_holding(
            symbol=symbol,
            name=security.get("name"),
            shares=shares,
            current_price=price,
            total_value=parse_optional_decimal(
                data.get("institution_value"), f"{symbol}.institution_value"
            ),
            category=classify_security_type(
                security.get("type"),
                PLAID_CATEGORY_MAP,
                PLAID_DEFAULT_CATEGORY,
            ),
        )
