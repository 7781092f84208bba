"""Plaid API environments.

Selects the Plaid host used by the Plaid adapter. Sandbox uses test
institutions and credentials; production talks to real institutions.
"""

from enum import Enum


class PlaidEnvironment(str, Enum):
    """Plaid API environment selector."""

    SANDBOX = "sandbox"
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @property
    def base_url(self) -> str:
        """Plaid API host for this environment."""
        return f"https://{self.value}.plaid.com"
