"""Structured logging configuration.

Uses standard library logging with a JSON formatter. Context travels in
``extra={...}``; two groups of keys get their own place in the output:

* ``workflow_type`` / ``workflow_id`` are folded into one top-level
  ``workflow`` field (``"research:webhook"``), so every line about a workflow
  can be filtered the same way.
* Stream counters (``events_parsed``, ``events_dropped``) are gathered under
  ``stream``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

SERVICE_NAME = "aistudio-workflows"

_RESERVED_LOG_RECORD_ATTRS: set[str] = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

_STREAM_KEYS = ("events_parsed", "events_dropped")

# HTTP clients used by the providers and the webhook transport.
_NOISY_LOGGERS = ("openai", "httpx", "httpcore", "urllib3")


def _workflow_label(extra: dict[str, Any]) -> str | None:
    wf_type = extra.pop("workflow_type", None)
    wf_id = extra.pop("workflow_id", None)
    if wf_type is None and wf_id is None:
        return None
    if wf_id is None:
        return str(wf_type)
    return f"{wf_type or '?'}:{wf_id}"


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def __init__(self, service: str = SERVICE_NAME) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_ATTRS and not key.startswith("_")
        }

        workflow = _workflow_label(extra)
        if workflow is not None:
            payload["workflow"] = workflow

        stream = {key: extra.pop(key) for key in _STREAM_KEYS if key in extra}
        if stream:
            payload["stream"] = stream

        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str, service: str = SERVICE_NAME) -> None:
    """Configure root logging with structured JSON output."""

    root = logging.getLogger()

    # Re-configuration must not stack handlers.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter(service))

    root.addHandler(handler)
    root.setLevel(level.upper())

    # Request-level chatter from HTTP clients stays at INFO or quieter.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))
