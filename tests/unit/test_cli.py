"""Tests for the command-line entrypoint."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from aistudio_workflows import cli
from aistudio_workflows.workflows.research.builtin import OFFLINE_RESPONSE


def _json_lines(out: str) -> list[dict]:
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


@pytest.fixture(autouse=True)
def offline(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("AISTUDIO_LLM_PROVIDER", "none")
    monkeypatch.setenv("AISTUDIO_LOG_LEVEL", "ERROR")

    # main() reconfigures root logging; restore it for the rest of the session.
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_workflows_prints_stats(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["workflows"]) == 0

    stats = _json_lines(capsys.readouterr().out)[-1]
    assert stats["research"]["default"] == "builtin"
    assert set(stats) == {"research", "metadata", "content", "image", "bulk", "task"}


def test_research_offline(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["research", "--query", "What is X?"]) == 0

    result = _json_lines(capsys.readouterr().out)[-1]
    assert result["response"] == OFFLINE_RESPONSE


def test_research_stream(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["research", "--query", "q", "--stream", "--verbose"]) == 0

    events = [e for e in _json_lines(capsys.readouterr().out) if "type" in e]
    assert [e["type"] for e in events] == ["status", "delta", "done"]


def test_unavailable_workflow(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["research", "--query", "q", "--workflow", "webhook"]) == 4
    assert "not available" in capsys.readouterr().err


def test_configuration_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("AISTUDIO_LLM_PROVIDER", "llama")

    assert cli.main(["workflows"]) == 2
    assert "Configuration error" in capsys.readouterr().err
