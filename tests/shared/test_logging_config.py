"""Tests for stdout logging configuration and context propagation."""

from __future__ import annotations

import io
import json
import logging

import pytest

from packages.decibel_shared.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_context,
    get_logger,
    log_context,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_context()


def test_json_lines_carry_context_and_extra_fields() -> None:
    stream = io.StringIO()
    configure_logging(
        level="INFO", json_output=True, service="decibel", environment="test", stream=stream
    )

    with log_context({"trace_id": "trace-9"}):
        get_logger("decibel.test").info("zone created", extra={"zone_id": 4})

    record = json.loads(stream.getvalue().strip())
    assert record["message"] == "zone created"
    assert record["level"] == "INFO"
    assert record["service"] == "decibel"
    assert record["environment"] == "test"
    assert record["trace_id"] == "trace-9"
    assert record["zone_id"] == 4


def test_plain_output_appends_sorted_pairs() -> None:
    stream = io.StringIO()
    configure_logging(level="INFO", json_output=False, stream=stream)

    get_logger("decibel.test").info("vote cast", extra={"proposal_id": 2})

    line = stream.getvalue().strip()
    assert "INFO decibel.test vote cast" in line
    assert line.endswith("proposal_id=2")


def test_repeated_configuration_does_not_duplicate_handlers() -> None:
    configure_logging(stream=io.StringIO())
    configure_logging(stream=io.StringIO())
    assert len(logging.getLogger().handlers) == 1


def test_level_filters_records() -> None:
    stream = io.StringIO()
    configure_logging(level="WARNING", stream=stream)
    get_logger("decibel.test").info("hidden")
    assert stream.getvalue() == ""


def test_log_context_is_restored_after_block() -> None:
    bind_context(principal="city", ignored=None)
    with log_context({"proposal_id": 5}):
        assert get_context() == {"principal": "city", "proposal_id": "5"}
    assert get_context() == {"principal": "city"}
