"""Unit tests for the webhook research workflow."""

from __future__ import annotations

from typing import Any

import pytest
import requests

from aistudio_workflows.errors import (
    AIServiceError,
    InvalidResponseError,
    WebhookError,
    WorkflowUnavailableError,
)
from aistudio_workflows.workflows.models import (
    AgentQuery,
    ChatMessage,
    ErrorEvent,
    ResearchModelConfig,
    ResearchStreamOptions,
)
from aistudio_workflows.workflows.research import WebhookResearchWorkflow

URL = "http://research.local/run"


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        chunks: list[Any] | None = None,
        text: str = "",
        json_data: Any = None,
    ) -> None:
        self.status_code = status_code
        self.ok = status_code < 400
        self._chunks = chunks or []
        self._text = text
        self._json = json_data
        self.closed = False
        self.chunks_read = 0

    @property
    def text(self) -> str:
        return self._text

    def json(self) -> Any:
        if isinstance(self._json, Exception):
            raise self._json
        return self._json

    def iter_content(self, chunk_size: int | None = None):
        for chunk in self._chunks:
            if isinstance(chunk, Exception):
                raise chunk
            self.chunks_read += 1
            yield chunk

    def close(self) -> None:
        self.closed = True


class FakeSession:
    def __init__(self, response: FakeResponse | Exception) -> None:
        self._response = response
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


def _workflow(response: FakeResponse | Exception, **kwargs: Any) -> tuple:
    session = FakeSession(response)
    return WebhookResearchWorkflow(URL, session=session, **kwargs), session


def _events(*lines: str) -> list[bytes]:
    return [f"data: {line}\n\n".encode() for line in lines]


def test_availability_follows_url() -> None:
    assert WebhookResearchWorkflow(URL).is_available() is True
    assert WebhookResearchWorkflow("  ").is_available() is False
    assert WebhookResearchWorkflow(None).is_available() is False


def test_execute_posts_query_and_parses_response() -> None:
    response = FakeResponse(
        json_data={"response": "Answer", "sources": [{"name": "Doc", "usedInResponse": True}]}
    )
    workflow, session = _workflow(response, read_timeout_seconds=30.0)
    query = AgentQuery(
        query="What is X?",
        history=[ChatMessage(role="user", text="hi")],
        notebook_id="nb-1",
        models=ResearchModelConfig(answer_model="gpt-4o"),
    )

    result = workflow.execute(query)

    assert result.response == "Answer"
    assert result.sources[0].used_in_response is True
    call = session.calls[0]
    assert call["url"] == URL
    assert call["json"] == {
        "query": "What is X?",
        "history": [{"role": "user", "text": "hi"}],
        "notebookId": "nb-1",
        "modelConfig": {"answerModel": "gpt-4o"},
    }
    assert call["headers"]["Accept"] == "application/json"
    assert call["stream"] is False
    assert call["timeout"] == (10.0, 30.0)


def test_execute_non_2xx_raises_webhook_error() -> None:
    workflow, _ = _workflow(FakeResponse(status_code=503, text="overloaded"))

    with pytest.raises(WebhookError) as exc_info:
        workflow.execute(AgentQuery(query="q"))

    assert exc_info.value.status_code == 503
    assert exc_info.value.retryable is True
    assert "503" in exc_info.value.message
    assert "overloaded" in exc_info.value.message


def test_execute_transport_failure() -> None:
    workflow, _ = _workflow(requests.ConnectionError("refused"))

    with pytest.raises(AIServiceError) as exc_info:
        workflow.execute(AgentQuery(query="q"))

    assert exc_info.value.code == "TRANSPORT"


def test_execute_invalid_body() -> None:
    workflow, _ = _workflow(FakeResponse(json_data=ValueError("not json")))

    with pytest.raises(InvalidResponseError):
        workflow.execute(AgentQuery(query="q"))


def test_execute_unconfigured_raises() -> None:
    with pytest.raises(WorkflowUnavailableError):
        WebhookResearchWorkflow(None).execute(AgentQuery(query="q"))


def test_stream_yields_events_in_order_and_closes() -> None:
    chunks = _events(
        '{"type":"status","status":"Searching"}',
        '{"type":"delta","content":"Hi"}',
        '{"type":"done","response":"Hi"}',
    )
    response = FakeResponse(chunks=chunks)
    workflow, session = _workflow(response)

    events = list(
        workflow.execute_stream(ResearchStreamOptions(query="q", verbose=True, search_web=False))
    )

    assert [e.type for e in events] == ["status", "delta", "done"]
    assert response.closed is True
    call = session.calls[0]
    assert call["stream"] is True
    assert call["headers"]["Accept"] == "text/event-stream"
    assert call["json"] == {"query": "q", "verbose": True, "searchWeb": False}


def test_stream_non_2xx_yields_single_error_without_reading() -> None:
    response = FakeResponse(status_code=500, text="boom", chunks=_events('{"type":"done"}'))
    workflow, _ = _workflow(response)

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert len(events) == 1
    assert isinstance(events[0], ErrorEvent)
    assert events[0].error == "Webhook request failed with status 500: boom"
    assert response.chunks_read == 0
    assert response.closed is True


def test_stream_without_body() -> None:
    response = FakeResponse(status_code=204)
    workflow, _ = _workflow(response)

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert [e.error for e in events] == ["Webhook response has no body"]
    assert response.closed is True


def test_stream_unconfigured_yields_error() -> None:
    events = list(WebhookResearchWorkflow("").execute_stream(ResearchStreamOptions(query="q")))

    assert len(events) == 1
    assert events[0].type == "error"


def test_stream_connection_failure_yields_error() -> None:
    workflow, _ = _workflow(requests.ConnectionError("refused"))

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert len(events) == 1
    assert events[0].type == "error"
    assert "refused" in events[0].error


def test_stream_mid_stream_failure_becomes_error_event() -> None:
    chunks = _events('{"type":"delta","content":"partial"}') + [
        requests.ConnectionError("connection reset")
    ]
    response = FakeResponse(chunks=chunks)
    workflow, _ = _workflow(response)

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert [e.type for e in events] == ["delta", "error"]
    assert "connection reset" in events[1].error
    assert response.closed is True


def test_empty_stream_yields_nothing() -> None:
    response = FakeResponse(chunks=[])
    workflow, _ = _workflow(response)

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert events == []
    assert response.closed is True


def test_stream_without_terminal_event_just_ends() -> None:
    response = FakeResponse(chunks=_events('{"type":"delta","content":"partial"}'))
    workflow, _ = _workflow(response)

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert [e.type for e in events] == ["delta"]
    assert response.closed is True


def test_stream_skips_malformed_events() -> None:
    chunks = [b"data: {oops\n\n"] + _events('{"type":"done","response":"ok"}')
    workflow, _ = _workflow(FakeResponse(chunks=chunks))

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert [e.type for e in events] == ["done"]


def test_malformed_line_between_valid_frames() -> None:
    chunks = (
        _events('{"type":"status","status":"Searching"}')
        + [b"data: {not json\n\n"]
        + _events('{"type":"done","response":"ok"}')
    )
    workflow, _ = _workflow(FakeResponse(chunks=chunks))

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert [e.type for e in events] == ["status", "done"]
    assert events[0].status == "Searching"
    assert events[1].response == "ok"


def test_loosely_shaped_events_are_kept() -> None:
    chunks = _events(
        '{"type":"tool_start","tool":"search","toolInput":"q=x"}',
        '{"type":"status","status":null}',
        '{"type":"sources","sources":[{"title":"Doc","content":"text"}]}',
        '{"type":"done"}',
    )
    workflow, _ = _workflow(FakeResponse(chunks=chunks))

    events = list(workflow.execute_stream(ResearchStreamOptions(query="q")))

    assert [e.type for e in events] == ["tool_start", "status", "sources", "done"]
    assert events[0].tool_input == "q=x"
    assert events[1].status is None
    assert events[2].sources[0].name is None
    assert events[2].sources[0].content == "text"


def test_early_termination_releases_connection() -> None:
    chunks = _events(
        '{"type":"status","status":"one"}',
        '{"type":"status","status":"two"}',
        '{"type":"done"}',
    )
    response = FakeResponse(chunks=chunks)
    workflow, _ = _workflow(response)

    stream = workflow.execute_stream(ResearchStreamOptions(query="q"))
    first = next(stream)
    stream.close()

    assert first.status == "one"
    assert response.closed is True
    assert response.chunks_read == 1
