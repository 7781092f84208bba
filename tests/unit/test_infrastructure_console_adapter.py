"""Unit tests for the structlog console adapter."""

import json

import pytest
import structlog

from src.infrastructure.logging import ConsoleAdapter


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def read_json_lines(capsys) -> list[dict]:
    return [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]


class TestConsoleAdapter:
    def test_json_output_carries_event_and_context(self, capsys):
        logger = ConsoleAdapter(use_json=True)

        logger.info("sync_account_completed", created=2, updated=1)

        [entry] = read_json_lines(capsys)
        assert entry["event"] == "sync_account_completed"
        assert entry["level"] == "info"
        assert entry["created"] == 2
        assert "timestamp" in entry

    def test_bound_context_is_included(self, capsys):
        logger = ConsoleAdapter(use_json=True).bind(account_id="abc", provider="schwab")

        logger.warning("sync_rejected_in_progress")

        [entry] = read_json_lines(capsys)
        assert entry["account_id"] == "abc"
        assert entry["provider"] == "schwab"

    def test_error_records_exception_details(self, capsys):
        logger = ConsoleAdapter(use_json=True)

        logger.error("sync_reconciliation_failed", error=RuntimeError("disk full"))

        [entry] = read_json_lines(capsys)
        assert entry["error_type"] == "RuntimeError"
        assert entry["error_message"] == "disk full"

    def test_level_filter(self, capsys):
        logger = ConsoleAdapter(use_json=True, level="WARNING")

        logger.debug("hidden")
        logger.info("hidden")
        logger.warning("shown")

        assert [e["event"] for e in read_json_lines(capsys)] == ["shown"]

    def test_unknown_level_falls_back_to_info(self, capsys):
        logger = ConsoleAdapter(use_json=True, level="verbose")

        logger.debug("hidden")
        logger.info("shown")

        assert [e["event"] for e in read_json_lines(capsys)] == ["shown"]
