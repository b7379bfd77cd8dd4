"""Helpers for turning free-form model output into typed records."""

from __future__ import annotations

import json
import logging
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from aistudio_workflows.workflows.models import ChatMessage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text.strip()).strip()


def _extract_json_object(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]


def parse_model_output(text: str, model_cls: type[M]) -> M | None:
    """Parse model text into ``model_cls``.

    Tolerates markdown code fences and prose around a single JSON object.
    Returns None when nothing valid can be recovered.
    """
    if not text:
        return None

    cleaned = strip_code_fences(text)
    candidates = [cleaned]
    embedded = _extract_json_object(cleaned)
    if embedded is not None and embedded != cleaned:
        candidates.append(embedded)

    for candidate in candidates:
        try:
            return model_cls.model_validate(json.loads(candidate))
        except (json.JSONDecodeError, ValidationError):
            continue

    logger.warning(
        "Could not parse structured model output",
        extra={"schema": model_cls.__name__, "output": text[:200]},
    )
    return None


def format_history(history: list[ChatMessage] | None, assistant_label: str = "Assistant") -> str:
    if not history:
        return ""
    return "\n".join(
        f"{'User' if msg.role == 'user' else assistant_label}: {msg.text}" for msg in history
    )
