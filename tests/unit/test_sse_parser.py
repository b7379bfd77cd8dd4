"""Unit tests for incremental SSE frame parsing."""

from __future__ import annotations

import json
import logging

import pytest

from aistudio_workflows.workflows.models import (
    DeltaEvent,
    DoneEvent,
    ErrorEvent,
    SourcesEvent,
    StatusEvent,
    ToolStartEvent,
)
from aistudio_workflows.workflows.sse import SSEFrameParser, format_sse_event, iter_sse_events

STREAM = (
    'data: {"type":"status","status":"Searching..."}\n\n'
    'data: {"type":"tool_start","tool":"search","toolInput":{"q":"ünïcödé"}}\n\n'
    'data: {"type":"delta","content":"Héllo "}\n\n'
    'data: {"type":"delta","content":"wörld 🌍"}\n\n'
    'data: {"type":"sources","sources":[{"id":"s1","name":"Doc"}]}\n\n'
    'data: {"type":"done","response":"Héllo wörld 🌍","steps":2}\n\n'
).encode()


def _parse_chunks(chunks: list[bytes]) -> list:
    return list(iter_sse_events(chunks))


def _split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


def test_parses_whole_stream() -> None:
    events = _parse_chunks([STREAM])

    assert [e.type for e in events] == [
        "status",
        "tool_start",
        "delta",
        "delta",
        "sources",
        "done",
    ]
    assert isinstance(events[0], StatusEvent)
    assert isinstance(events[1], ToolStartEvent)
    assert events[1].tool_input == {"q": "ünïcödé"}
    assert isinstance(events[4], SourcesEvent)
    assert events[4].sources[0].name == "Doc"
    assert isinstance(events[5], DoneEvent)
    assert events[5].steps == 2


@pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 16, 64])
def test_chunk_boundaries_do_not_change_events(size: int) -> None:
    expected = [e.model_dump() for e in _parse_chunks([STREAM])]

    events = _parse_chunks(_split_every(STREAM, size))

    assert [e.model_dump() for e in events] == expected


def test_split_inside_multibyte_character() -> None:
    data = 'data: {"type":"delta","content":"🌍"}\n\n'.encode()
    cut = data.index("🌍".encode()) + 2

    events = _parse_chunks([data[:cut], data[cut:]])

    assert len(events) == 1
    assert isinstance(events[0], DeltaEvent)
    assert events[0].content == "🌍"


def test_split_inside_delimiter_and_prefix() -> None:
    parser = SSEFrameParser()

    assert parser.feed(b'data: {"type":"delta","content":"a"}\n') == []
    first = parser.feed(b"\nda")
    assert [e.content for e in first] == ["a"]
    assert parser.pending == "da"
    assert parser.feed(b'ta: {"type":"delta","content":"b"}') == []
    second = parser.feed(b"\n\n")

    assert [e.content for e in second] == ["b"]
    assert parser.pending == ""


def test_final_frame_without_blank_line() -> None:
    events = _parse_chunks([b'data: {"type":"status","status":"x"}\n\ndata: {"type":"done"}'])

    assert [e.type for e in events] == ["status", "done"]


def test_multiple_data_lines_in_one_frame() -> None:
    frame = b'data: {"type":"delta","content":"a"}\ndata: {"type":"delta","content":"b"}\n\n'

    events = _parse_chunks([frame])

    assert [e.content for e in events] == ["a", "b"]


def test_crlf_and_non_data_lines() -> None:
    frame = b': keep-alive\r\nevent: message\r\ndata: {"type":"delta","content":"a"}\r\n\n'

    events = _parse_chunks([frame])

    assert len(events) == 1
    assert events[0].content == "a"


def test_malformed_events_are_dropped(caplog: pytest.LogCaptureFixture) -> None:
    parser = SSEFrameParser()
    data = (
        b"data: {not json}\n\n"
        b'data: {"type":"mystery"}\n\n'
        b'data: {"type":"delta","content":"ok"}\n\n'
    )

    with caplog.at_level(logging.WARNING):
        events = list(iter_sse_events([data], parser))

    assert [e.type for e in events] == ["delta"]
    assert parser.events_dropped == 2
    assert parser.events_parsed == 1
    assert any("malformed" in r.getMessage() for r in caplog.records)


def test_malformed_line_between_valid_frames_keeps_order() -> None:
    parser = SSEFrameParser()
    data = (
        b'data: {"type":"delta","content":"first"}\n\n'
        b"data: {not json\n\n"
        b'data: {"type":"done","response":"first"}\n\n'
    )

    events = list(iter_sse_events([data], parser))

    assert [e.type for e in events] == ["delta", "done"]
    assert events[0].content == "first"
    assert parser.events_dropped == 1


def test_only_bad_json_or_type_is_dropped() -> None:
    parser = SSEFrameParser()
    data = (
        b'data: {"type":"tool_start","toolInput":"q=x"}\n\n'
        b'data: {"type":"tool_result","tool":null,"toolResult":[1, 2]}\n\n'
        b'data: {"type":"delta","content":null}\n\n'
        b'data: {"type":"sources","sources":[{"title":"Untitled"}]}\n\n'
        b'data: {"content":"no type"}\n\n'
        b"data: [1, 2]\n\n"
    )

    events = list(iter_sse_events([data], parser))

    assert [e.type for e in events] == ["tool_start", "tool_result", "delta", "sources"]
    assert events[1].tool_result == [1, 2]
    assert events[3].sources[0].model_dump()["title"] == "Untitled"
    assert parser.events_dropped == 2


def test_empty_stream_yields_nothing() -> None:
    assert _parse_chunks([]) == []
    assert _parse_chunks([b"", b"\n\n", b""]) == []


def test_unknown_fields_are_kept() -> None:
    events = _parse_chunks([b'data: {"type":"status","status":"s","progress":0.5}\n\n'])

    assert events[0].model_dump()["progress"] == 0.5


def test_error_event_default_message() -> None:
    events = _parse_chunks([b'data: {"type":"error"}\n\n'])

    assert isinstance(events[0], ErrorEvent)
    assert events[0].error == "Unknown error occurred"


def test_feed_after_close_fails() -> None:
    parser = SSEFrameParser()
    parser.close()

    with pytest.raises(RuntimeError):
        parser.feed(b"data: {}\n\n")


def test_transport_error_after_complete_events() -> None:
    def chunks():
        yield b'data: {"type":"delta","content":"a"}\n\n'
        raise ConnectionError("reset")

    received = []
    with pytest.raises(ConnectionError):
        for event in iter_sse_events(chunks()):
            received.append(event)

    assert [e.content for e in received] == ["a"]


def test_format_sse_event_round_trips() -> None:
    frame = format_sse_event(ToolStartEvent(tool="search", tool_input={"q": "x"}))

    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    assert json.loads(frame[len("data: ") : -2]) == {
        "type": "tool_start",
        "tool": "search",
        "toolInput": {"q": "x"},
    }
    assert _parse_chunks([frame.encode()])[0].tool == "search"
