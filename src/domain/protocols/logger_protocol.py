"""LoggerProtocol definition for structured logging.

Handlers depend on this protocol instead of structlog directly so tests can
inject a MagicMock and assert on emitted events. Implementations MUST keep
logs structured (event name + key-value context) and MUST NOT log tokens,
secrets or full account numbers.

Usage:
    from src.core.container import get_logger

    logger = get_logger()
    logger.info("sync_account_completed", account_id=str(account_id))

    run_logger = logger.bind(account_id=str(account_id), provider="schwab")
    run_logger.info("sync_state_transition", from_state="idle", to_state="fetching")
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters."""

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level event."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level event."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level event."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level event.

        Args:
            message: Event name.
            error: Optional exception; implementations add error_type and
                error_message fields.
            **context: Structured key-value context fields.
        """
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return a new logger with context bound to every later call.

        The original logger is unchanged.
        """
        ...
