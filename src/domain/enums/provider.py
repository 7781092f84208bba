"""Institution identifiers.

Closed set of provider variants an account can be backed by. Adding an
institution means adding a member here, an adapter under
src/infrastructure/providers/{slug}/ and a case in ProviderFactory.
"""

from enum import Enum


class Provider(str, Enum):
    """Institution backing an account."""

    ETRADE = "etrade"  # OAuth 1.0a brokerage
    SCHWAB = "schwab"  # OAuth 2.0 brokerage
    PLAID = "plaid"  # Link-token aggregator
    MANUAL = "manual"  # User-maintained, never synced
