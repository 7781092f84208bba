"""Sync state machine states.

A single sync invocation walks:

    idle -> credential_check -> fetching -> normalizing -> reconciling
         -> logging -> done

with ``errored`` reachable from credential_check, fetching, normalizing and
reconciling. Errored runs still pass through logging semantics (exactly one
error activity) but the state itself is terminal.
"""

from enum import Enum


class SyncState(str, Enum):
    """State of one sync invocation."""

    IDLE = "idle"
    CREDENTIAL_CHECK = "credential_check"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    RECONCILING = "reconciling"
    LOGGING = "logging"
    DONE = "done"
    ERRORED = "errored"

    @classmethod
    def transitions(cls) -> dict["SyncState", frozenset["SyncState"]]:
        """Allowed transitions, keyed by source state."""
        return {
            cls.IDLE: frozenset({cls.CREDENTIAL_CHECK}),
            cls.CREDENTIAL_CHECK: frozenset({cls.FETCHING, cls.ERRORED}),
            cls.FETCHING: frozenset({cls.NORMALIZING, cls.ERRORED}),
            cls.NORMALIZING: frozenset({cls.RECONCILING, cls.ERRORED}),
            cls.RECONCILING: frozenset({cls.LOGGING, cls.ERRORED}),
            cls.LOGGING: frozenset({cls.DONE}),
            cls.DONE: frozenset(),
            cls.ERRORED: frozenset(),
        }

    def can_transition_to(self, target: "SyncState") -> bool:
        """Check whether moving to target is legal."""
        return target in SyncState.transitions()[self]
