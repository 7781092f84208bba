"""Unit tests for shared provider normalization helpers.

Covers:
- Decimal parsing (finite values only, str() conversion)
- Quantization rules (shares 4dp, money 2dp, ROUND_HALF_UP)
- Security type classification with defaults
- Price / total derivation
- Duplicate symbol collapse
"""

from decimal import Decimal

import pytest

from src.domain.enums import HoldingCategory
from src.infrastructure.providers.normalization import (
    PayloadError,
    build_holding,
    classify_security_type,
    collapse_duplicates,
    invalid_payload,
    mask_ref,
    parse_decimal,
    parse_optional_decimal,
    quantize_money,
    quantize_shares,
)

TABLE = {
    "eq": HoldingCategory.STOCKS,
    "etf": HoldingCategory.ETFS,
    "mf": HoldingCategory.MUTUAL_FUNDS,
    "mmf": HoldingCategory.CASH,
}


class TestParseDecimal:
    def test_float_parses_without_binary_noise(self):
        assert parse_decimal(190.12, "price") == Decimal("190.12")

    def test_numeric_string_parses(self):
        assert parse_decimal("10.5", "shares") == Decimal("10.5")

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", float("nan")])
    def test_non_finite_values_rejected(self, value):
        with pytest.raises(PayloadError):
            parse_decimal(value, "price")

    @pytest.mark.parametrize("value", ["abc", True, [1]])
    def test_garbage_rejected(self, value):
        with pytest.raises(PayloadError):
            parse_decimal(value, "price")

    def test_required_value_missing_rejected(self):
        with pytest.raises(PayloadError) as exc_info:
            parse_decimal(None, "marketValue")

        assert exc_info.value.field == "marketValue"

    @pytest.mark.parametrize("value", [None, ""])
    def test_optional_missing_returns_none(self, value):
        assert parse_optional_decimal(value, "price") is None


class TestQuantize:
    def test_money_rounds_half_up(self):
        assert quantize_money(Decimal("1.005")) == Decimal("1.01")
        assert quantize_money(Decimal("-1.005")) == Decimal("-1.01")

    def test_shares_keep_four_places(self):
        assert quantize_shares(Decimal("0.123456")) == Decimal("0.1235")
        assert str(quantize_shares(Decimal("10"))) == "10.0000"


class TestClassifySecurityType:
    def test_exact_match_is_case_insensitive(self):
        assert classify_security_type("EQ", TABLE, HoldingCategory.OTHER) == HoldingCategory.STOCKS

    def test_longer_key_wins_over_substring(self):
        assert classify_security_type("MMF", TABLE, HoldingCategory.OTHER) == HoldingCategory.CASH

    def test_substring_match(self):
        assert (
            classify_security_type("leveraged etf", TABLE, HoldingCategory.OTHER)
            == HoldingCategory.ETFS
        )

    @pytest.mark.parametrize("token", [None, "", "   ", "WARRANT"])
    def test_unknown_or_missing_uses_default(self, token):
        assert classify_security_type(token, TABLE, HoldingCategory.OTHER) == HoldingCategory.OTHER


class TestBuildHolding:
    def test_derives_total_from_price(self):
        holding = build_holding(
            symbol="AAPL",
            name="Apple Inc.",
            shares=Decimal("3"),
            current_price=Decimal("190.125"),
            total_value=None,
            category=HoldingCategory.STOCKS,
        )

        assert holding.current_price == Decimal("190.13")
        assert holding.total_value == Decimal("570.38")
        assert holding.shares == Decimal("3.0000")
        assert holding.change_percent == Decimal("0.00")

    def test_derives_price_from_total(self):
        holding = build_holding(
            symbol="VTI",
            name=None,
            shares=Decimal("4"),
            current_price=None,
            total_value=Decimal("1000.00"),
            category=HoldingCategory.ETFS,
        )

        assert holding.current_price == Decimal("250.00")
        assert holding.name == "VTI"

    def test_no_price_and_no_total_rejected(self):
        with pytest.raises(PayloadError):
            build_holding(
                symbol="AAPL",
                name="Apple",
                shares=Decimal("1"),
                current_price=None,
                total_value=None,
                category=HoldingCategory.STOCKS,
            )

    def test_zero_shares_cannot_derive_price(self):
        with pytest.raises(PayloadError):
            build_holding(
                symbol="AAPL",
                name="Apple",
                shares=Decimal("0"),
                current_price=None,
                total_value=Decimal("10"),
                category=HoldingCategory.STOCKS,
            )


class TestCollapseDuplicates:
    def _holding(self, symbol: str, shares: str, total: str, name: str = "Name"):
        return build_holding(
            symbol=symbol,
            name=name,
            shares=Decimal(shares),
            current_price=None,
            total_value=Decimal(total),
            category=HoldingCategory.STOCKS,
        )

    def test_duplicates_merge_into_one_row(self):
        holdings = collapse_duplicates(
            [
                self._holding("AAPL", "10", "1000", name="First"),
                self._holding("MSFT", "1", "400"),
                self._holding("AAPL", "30", "3400", name="Second"),
            ],
            "schwab",
        )

        assert [h.symbol for h in holdings] == ["AAPL", "MSFT"]
        aapl = holdings[0]
        assert aapl.shares == Decimal("40.0000")
        assert aapl.total_value == Decimal("4400.00")
        assert aapl.current_price == Decimal("110.00")
        assert aapl.name == "First"

    def test_unique_symbols_untouched(self):
        original = [self._holding("AAPL", "1", "100"), self._holding("TSLA", "2", "500")]

        assert collapse_duplicates(original, "plaid") == original


class TestErrorsAndMasking:
    def test_invalid_payload_truncates_body(self):
        error = invalid_payload("etrade", "bad payload", "x" * 2000)

        assert error.provider_name == "etrade"
        assert len(error.response_body) == 500

    def test_invalid_payload_without_body(self):
        assert invalid_payload("etrade", "bad payload").response_body is None

    def test_mask_ref_keeps_last_four(self):
        assert mask_ref("ABCDEF123456") == "****3456"
        assert mask_ref("12") == "****12"
        assert mask_ref(None) is None
