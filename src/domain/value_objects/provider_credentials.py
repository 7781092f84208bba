"""Provider credential material value object.

Immutable snapshot of the tokens needed to call one provider on behalf of
one account. Which fields are populated depends on the auth style:

    - OAuth 1.0a (E*TRADE): access_token + access_token_secret, no expiry
    - OAuth 2.0 (Schwab): access_token + refresh_token + expires_at
    - Link token (Plaid): access_token only, no expiry

Usage:
    credentials = ProviderCredentials(
        access_token="...",
        refresh_token="...",
        expires_at=datetime.now(UTC) + timedelta(minutes=30),
    )

    if credentials.is_expired():
        # Refresh or re-authenticate
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta


@dataclass(frozen=True, repr=False)
class ProviderCredentials:
    """Tokens for one provider account.

    Attributes:
        access_token: Bearer/OAuth access token (or Plaid access token).
        access_token_secret: OAuth 1.0a token secret used for signing.
        refresh_token: OAuth 2.0 refresh token.
        expires_at: Absolute access-token expiry (None = no expiry contract).

    Security:
        repr() never includes token values, so credentials can sit in
        structured log context or tracebacks without leaking.
    """

    access_token: str
    access_token_secret: str | None = None
    refresh_token: str | None = None
    expires_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate credentials after initialization.

        Raises:
            ValueError: If access_token is empty or expires_at is naive.
        """
        if not self.access_token or not self.access_token.strip():
            raise ValueError("access_token cannot be empty")

        if self.expires_at is not None and self.expires_at.tzinfo is None:
            raise ValueError("expires_at must be timezone-aware")

    def __repr__(self) -> str:
        return (
            "ProviderCredentials("
            f"has_secret={self.access_token_secret is not None}, "
            f"has_refresh_token={self.refresh_token is not None}, "
            f"expires_at={self.expires_at!r})"
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if credentials have expired.

        Returns:
            bool: True if past expiration time. False if no expiration set.
        """
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= self.expires_at

    def is_expiring_soon(
        self,
        threshold: timedelta = timedelta(minutes=1),
        now: datetime | None = None,
    ) -> bool:
        """Check if credentials will expire within threshold.

        Used for proactive refresh before expiration.

        Args:
            threshold: Time window to check.
            now: Reference time (defaults to current UTC time).

        Returns:
            bool: True if expiry falls within threshold (or already passed).
        """
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= (self.expires_at - threshold)

    def time_until_expiry(self) -> timedelta | None:
        """Get time remaining until credentials expire.

        Returns:
            timedelta | None: Remaining time (zero if expired), None if no expiry.
        """
        if self.expires_at is None:
            return None

        remaining = self.expires_at - datetime.now(UTC)
        if remaining.total_seconds() < 0:
            return timedelta(seconds=0)
        return remaining

    @property
    def can_refresh(self) -> bool:
        """Whether a refresh token is available."""
        return bool(self.refresh_token)
