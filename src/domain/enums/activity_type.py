"""Activity type enumeration."""

from enum import Enum


class ActivityType(str, Enum):
    """Kind of audit trail entry.

    SYNC and ERROR are written by the sync orchestrator (one per attempt).
    BUY and SELL are recorded by callers outside the sync layer.
    """

    BUY = "buy"
    SELL = "sell"
    SYNC = "sync"
    ERROR = "error"
