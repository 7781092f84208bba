"""Holding category enumeration.

Closed set of canonical categories every provider security type is
classified into. Portfolio category totals are computed from these.
"""

from enum import Enum


class HoldingCategory(str, Enum):
    """Canonical category of a holding."""

    STOCKS = "stocks"
    ETFS = "etfs"
    BONDS = "bonds"
    CRYPTO = "crypto"
    CASH = "cash"
    MUTUAL_FUNDS = "mutual_funds"
    OTHER = "other"
