"""Sync run state machine.

Tracks the state of one SyncAccount invocation and logs every transition.
An illegal transition is a programming error and raises ValueError.
"""

from uuid import UUID

from src.domain.enums import SyncState
from src.domain.protocols.logger_protocol import LoggerProtocol


class SyncRun:
    """State of one sync invocation.

    Example:
        >>> run = SyncRun(account_id=account.id, logger=logger)
        >>> run.advance(SyncState.CREDENTIAL_CHECK)
        >>> run.advance(SyncState.FETCHING)
        >>> run.state
        <SyncState.FETCHING: 'fetching'>
    """

    def __init__(self, *, account_id: UUID, logger: LoggerProtocol) -> None:
        self.account_id = account_id
        self.state = SyncState.IDLE
        self.history: list[SyncState] = [SyncState.IDLE]
        self._logger = logger

    def advance(self, target: SyncState) -> None:
        """Move to target.

        Raises:
            ValueError: target is not reachable from the current state.
        """
        if not self.state.can_transition_to(target):
            raise ValueError(
                f"Illegal sync transition: {self.state.value} -> {target.value}"
            )

        self._logger.info(
            "sync_state_transition",
            account_id=str(self.account_id),
            from_state=self.state.value,
            to_state=target.value,
        )
        self.state = target
        self.history.append(target)

    @property
    def is_terminal(self) -> bool:
        return self.state in (SyncState.DONE, SyncState.ERRORED)
