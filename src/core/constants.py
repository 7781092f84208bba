"""Centralized constants for internal implementation details.

This module contains constants that are internal implementation details,
NOT environment-specific configuration. For environment-specific settings,
use `src/core/config.py` instead.

Categories:
- Timeouts: Default timeouts for external provider calls
- Prefixes: Standard protocol prefixes
- Limits: Truncation and safety limits
- Precision: Decimal scales of the canonical holding model

Example:
    >>> from src.core.constants import BEARER_PREFIX
    >>> header = f"{BEARER_PREFIX}{access_token}"
"""

from decimal import Decimal

# =============================================================================
# Timeouts
# =============================================================================

PROVIDER_TIMEOUT_DEFAULT: float = 30.0
"""Default timeout for external provider API calls in seconds."""

TOKEN_REFRESH_MARGIN_DEFAULT: int = 60
"""Seconds before expiry at which OAuth2 tokens are refreshed proactively."""

SYNC_LOCK_TTL_DEFAULT: int = 300
"""Lifetime of a distributed sync lock in seconds (guards crashed holders)."""


# =============================================================================
# Prefixes
# =============================================================================

BEARER_PREFIX: str = "Bearer "
"""HTTP Authorization header prefix for Bearer tokens."""

SYNC_LOCK_KEY_PREFIX: str = "sync_lock"
"""Key prefix for per-account sync locks."""


# =============================================================================
# Response Limits
# =============================================================================

RESPONSE_BODY_MAX_LENGTH: int = 500
"""Maximum length for response body in error messages (truncation limit)."""


# =============================================================================
# Decimal Precision
# =============================================================================

MONEY_QUANTUM: Decimal = Decimal("0.01")
"""Scale for balances, prices, totals and percentages (2dp)."""

SHARES_QUANTUM: Decimal = Decimal("0.0001")
"""Scale for share quantities (4dp)."""
