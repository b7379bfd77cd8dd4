"""Unit tests for structured JSON logging."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from aistudio_workflows.logging import JsonFormatter, configure_logging


def _record(msg: str = "hello", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("aistudio.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_basic_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["level"] == "INFO"
    assert payload["service"] == "aistudio-workflows"
    assert payload["logger"] == "aistudio.test"
    assert payload["message"] == "hello"
    assert "extra" not in payload


def test_workflow_identity_is_lifted() -> None:
    record = _record(workflow_type="research", workflow_id="webhook", url="http://x")

    payload = json.loads(JsonFormatter(service="svc").format(record))

    assert payload["service"] == "svc"
    assert payload["workflow"] == "research:webhook"
    assert payload["extra"] == {"url": "http://x"}


def test_stream_counters_are_grouped() -> None:
    record = _record(events_parsed=3, events_dropped=1)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["stream"] == {"events_parsed": 3, "events_dropped": 1}
    assert "extra" not in payload


def test_exception_is_rendered() -> None:
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.LogRecord(
            "aistudio.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: bad" in payload["exception"]


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_replaces_handlers(restore_root_logging: logging.Logger) -> None:
    configure_logging("debug")
    configure_logging("warning")

    root = restore_root_logging
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.WARNING
    assert logging.getLogger("urllib3").level == logging.WARNING
