"""Unit tests for structured log formatting and command correlation."""

import json
import logging
import sys
from datetime import date

import pytest

from paperflow.logging_config import (
    CommandIdFilter,
    JsonFormatter,
    command_id_var,
    configure_logging,
)


def _record(msg="Paper version submitted", args=(), exc_info=None, **extra):
    record = logging.LogRecord(
        name="paperflow.orchestration.workflow_engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def command_id():
    token = command_id_var.set("cmd-42")
    yield "cmd-42"
    command_id_var.reset(token)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCommandIdFilter:
    def test_sets_current_command_id(self, command_id):
        record = _record()
        assert CommandIdFilter().filter(record) is True
        assert record.command_id == command_id

    def test_placeholder_outside_a_command(self):
        record = _record()
        CommandIdFilter().filter(record)
        assert record.command_id == "-"


class TestJsonFormatter:
    """One JSON object per record, carrying extra= fields."""

    def test_formats_command_id_and_extra_fields(self, command_id):
        record = _record(paper_id=7, version=2, status="SUBMITTED")
        CommandIdFilter().filter(record)

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "paperflow.orchestration.workflow_engine"
        assert payload["message"] == "Paper version submitted"
        assert payload["command_id"] == command_id
        assert payload["paper_id"] == 7
        assert payload["version"] == 2
        assert payload["status"] == "SUBMITTED"
        assert "timestamp" in payload
        assert "lineno" not in payload
        assert "msg" not in payload

    def test_message_arguments_are_interpolated(self):
        record = _record("Imported %d papers", args=(3,))
        assert json.loads(JsonFormatter().format(record))["message"] == "Imported 3 papers"

    def test_placeholder_command_id_is_omitted(self):
        record = _record()
        CommandIdFilter().filter(record)
        assert "command_id" not in json.loads(JsonFormatter().format(record))

    def test_non_json_values_are_stringified(self):
        record = _record(submitted_on=date(2024, 1, 2), paper_ids=[1, 2])
        payload = json.loads(JsonFormatter().format(record))
        assert payload["submitted_on"] == "2024-01-02"
        assert payload["paper_ids"] == [1, 2]

    def test_exception_is_included(self):
        try:
            raise RuntimeError("audit store unavailable")
        except RuntimeError:
            record = _record("Command failed", exc_info=sys.exc_info())

        payload = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: audit store unavailable" in payload["exception"]


class TestConfigureLogging:
    def test_production_uses_json(self, restore_root_logger):
        configure_logging(log_level="warning", environment="production")

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert any(isinstance(f, CommandIdFilter) for f in root.handlers[0].filters)

    def test_debug_overrides_level(self, restore_root_logger):
        configure_logging(log_level="ERROR", environment="development", debug=True)

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)
