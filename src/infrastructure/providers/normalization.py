"""Shared normalization helpers for provider mappers.

Every provider mapper turns its native payload into NormalizedHolding rows
with the same numeric rules:

    - Numbers parse as Decimal via str() so float noise never leaks in
    - Non-finite or unparseable required values fail the whole payload
    - Shares quantize to 4dp, money and percent to 2dp, ROUND_HALF_UP
    - A missing price is derived from total / shares, a missing total from
      shares * price
    - Duplicate symbols collapse into one row

Parse helpers raise PayloadError; mappers catch it at their public entry
point and return Failure(ProviderInvalidResponseError) for the whole payload.
"""

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

import structlog

from src.core.constants import MONEY_QUANTUM, RESPONSE_BODY_MAX_LENGTH, SHARES_QUANTUM
from src.core.enums import ErrorCode
from src.domain.enums.holding_category import HoldingCategory
from src.domain.errors import ProviderInvalidResponseError
from src.domain.protocols.provider_protocol import NormalizedHolding

logger = structlog.get_logger(__name__)


class PayloadError(ValueError):
    """A required field of a provider payload is missing or malformed."""

    def __init__(self, field: str, value: Any = None) -> None:
        super().__init__(f"Invalid value for {field}: {value!r}")
        self.field = field
        self.value = value


# =============================================================================
# Numeric Parsing
# =============================================================================


def parse_optional_decimal(value: Any, field: str) -> Decimal | None:
    """Parse a numeric field that a provider may omit.

    Returns:
        Decimal, or None when the value is absent (None or empty string).

    Raises:
        PayloadError: Value present but not a finite number.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise PayloadError(field, value)

    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise PayloadError(field, value) from e

    if not parsed.is_finite():
        raise PayloadError(field, value)
    return parsed


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a required numeric field.

    Raises:
        PayloadError: Value missing or not a finite number.
    """
    parsed = parse_optional_decimal(value, field)
    if parsed is None:
        raise PayloadError(field, value)
    return parsed


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2dp (balances, prices, totals, percentages)."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def quantize_shares(value: Decimal) -> Decimal:
    """Round to 4dp (share quantities)."""
    return value.quantize(SHARES_QUANTUM, rounding=ROUND_HALF_UP)


# =============================================================================
# Categorization
# =============================================================================


def classify_security_type(
    token: str | None,
    table: Mapping[str, HoldingCategory],
    default: HoldingCategory,
) -> HoldingCategory:
    """Classify a native security-type token into a HoldingCategory.

    Matching is case-insensitive: exact key first, then substring match with
    longer keys tried first so "mmf" wins over "mf".

    Args:
        token: Native security type (e.g. "EQ", "MUTUAL_FUND", "etf").
        table: Lowercase token to category mapping.
        default: Category for unknown or missing tokens.
    """
    if not token or not token.strip():
        return default

    normalized = token.strip().lower()
    exact = table.get(normalized)
    if exact is not None:
        return exact

    for key in sorted(table, key=len, reverse=True):
        if key in normalized:
            return table[key]

    logger.info(
        "unknown_security_type",
        security_type=token,
        defaulting_to=default.value,
    )
    return default


# =============================================================================
# Holding Construction
# =============================================================================


def build_holding(
    *,
    symbol: str,
    name: str | None,
    shares: Decimal,
    current_price: Decimal | None,
    total_value: Decimal | None,
    category: HoldingCategory,
    change_percent: Decimal | None = None,
) -> NormalizedHolding:
    """Build a quantized NormalizedHolding, deriving price or total.

    Raises:
        PayloadError: Neither price nor total is available, or shares is
            zero while the price must be derived.
    """
    if current_price is None:
        if total_value is None:
            raise PayloadError(f"{symbol}.current_price", None)
        if shares == 0:
            raise PayloadError(f"{symbol}.shares", shares)
        current_price = total_value / shares
    elif total_value is None:
        total_value = shares * current_price

    return NormalizedHolding(
        symbol=symbol,
        name=name or symbol,
        shares=quantize_shares(shares),
        current_price=quantize_money(current_price),
        total_value=quantize_money(total_value),
        category=category,
        change_percent=quantize_money(change_percent or Decimal("0")),
    )


def collapse_duplicates(
    holdings: Iterable[NormalizedHolding],
    provider_name: str,
) -> list[NormalizedHolding]:
    """Merge rows sharing a symbol into one row.

    Shares and totals are summed and the price re-derived. Name, category
    and change percent come from the first row. Order of first appearance
    is preserved.
    """
    merged: dict[str, NormalizedHolding] = {}

    for holding in holdings:
        existing = merged.get(holding.symbol)
        if existing is None:
            merged[holding.symbol] = holding
            continue

        logger.warning(
            "duplicate_symbol_collapsed",
            provider=provider_name,
            symbol=holding.symbol,
        )
        shares = existing.shares + holding.shares
        total = existing.total_value + holding.total_value
        price = total / shares if shares else existing.current_price
        merged[holding.symbol] = NormalizedHolding(
            symbol=existing.symbol,
            name=existing.name,
            shares=quantize_shares(shares),
            current_price=quantize_money(price),
            total_value=quantize_money(total),
            category=existing.category,
            change_percent=existing.change_percent,
        )

    return list(merged.values())


# =============================================================================
# Errors and Masking
# =============================================================================


def invalid_payload(
    provider_name: str,
    message: str,
    body: Any = None,
) -> ProviderInvalidResponseError:
    """Build the schema error returned for an unparseable payload."""
    return ProviderInvalidResponseError(
        code=ErrorCode.PROVIDER_RESPONSE_INVALID,
        message=message,
        provider_name=provider_name,
        response_body=str(body)[:RESPONSE_BODY_MAX_LENGTH] if body is not None else None,
    )


def mask_ref(ref: str | None) -> str | None:
    """Mask an account identifier for logs, keeping the last 4 characters."""
    if ref is None:
        return None
    if len(ref) >= 4:
        return f"****{ref[-4:]}"
    return f"****{ref}"
