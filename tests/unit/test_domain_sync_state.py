"""Unit tests for the sync state machine (SyncState and SyncRun)."""

from unittest.mock import Mock

import pytest
from uuid_extensions import uuid7

from src.application.services.sync_run import SyncRun
from src.domain.enums import SyncState

HAPPY_PATH = [
    SyncState.CREDENTIAL_CHECK,
    SyncState.FETCHING,
    SyncState.NORMALIZING,
    SyncState.RECONCILING,
    SyncState.LOGGING,
    SyncState.DONE,
]


class TestSyncState:
    def test_every_state_has_transitions(self):
        assert set(SyncState.transitions()) == set(SyncState)

    @pytest.mark.parametrize(
        "source",
        [
            SyncState.CREDENTIAL_CHECK,
            SyncState.FETCHING,
            SyncState.NORMALIZING,
            SyncState.RECONCILING,
        ],
    )
    def test_errored_reachable_from_working_states(self, source):
        assert source.can_transition_to(SyncState.ERRORED)

    @pytest.mark.parametrize("source", [SyncState.IDLE, SyncState.LOGGING])
    def test_errored_not_reachable_from_idle_or_logging(self, source):
        assert not source.can_transition_to(SyncState.ERRORED)

    @pytest.mark.parametrize("terminal", [SyncState.DONE, SyncState.ERRORED])
    def test_terminal_states_have_no_exits(self, terminal):
        assert not any(terminal.can_transition_to(state) for state in SyncState)

    def test_states_cannot_be_skipped(self):
        assert not SyncState.IDLE.can_transition_to(SyncState.FETCHING)
        assert not SyncState.FETCHING.can_transition_to(SyncState.RECONCILING)


class TestSyncRun:
    def test_happy_path(self):
        logger = Mock()
        run = SyncRun(account_id=uuid7(), logger=logger)

        for state in HAPPY_PATH:
            run.advance(state)

        assert run.state == SyncState.DONE
        assert run.history == [SyncState.IDLE, *HAPPY_PATH]
        assert run.is_terminal
        assert logger.info.call_count == len(HAPPY_PATH)

    def test_transition_is_logged(self):
        logger = Mock()
        account_id = uuid7()
        run = SyncRun(account_id=account_id, logger=logger)

        run.advance(SyncState.CREDENTIAL_CHECK)

        logger.info.assert_called_once_with(
            "sync_state_transition",
            account_id=str(account_id),
            from_state="idle",
            to_state="credential_check",
        )

    def test_illegal_transition_raises(self):
        run = SyncRun(account_id=uuid7(), logger=Mock())

        with pytest.raises(ValueError, match="idle -> done"):
            run.advance(SyncState.DONE)

        assert run.state == SyncState.IDLE

    def test_errored_is_terminal(self):
        run = SyncRun(account_id=uuid7(), logger=Mock())
        run.advance(SyncState.CREDENTIAL_CHECK)
        run.advance(SyncState.ERRORED)

        assert run.is_terminal
        with pytest.raises(ValueError):
            run.advance(SyncState.FETCHING)
