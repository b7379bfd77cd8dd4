"""Server-Sent-Events frame parsing for streaming workflow responses.

Wire format: frames separated by a blank line, each frame holding one or more
``data: <JSON>`` lines. Every data line is one event; lines without the prefix
are ignored.

The parser is incremental. Bytes may be split anywhere by the transport,
including inside a multi-byte character, a ``data:`` prefix or the frame
delimiter; lines are only interpreted once their whole frame has arrived.

A data line that is not a JSON object with a known ``type`` is logged and
dropped, and the stream carries on. Event fields are loosely typed, so an
odd field shape rarely costs an event. The drop count is kept on the parser
and reported when the stream ends.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ValidationError

from aistudio_workflows.workflows.models import ResearchStreamEvent, research_event_adapter

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
FRAME_DELIMITER = "\n\n"


class SSEFrameParser:
    """Incremental bytes -> events parser with one growing text buffer."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)()
        self._buffer = ""
        self._closed = False
        self.events_parsed = 0
        self.events_dropped = 0

    def feed(self, data: bytes) -> list[ResearchStreamEvent]:
        """Append raw bytes and return every event completed by them, in order."""
        if self._closed:
            raise RuntimeError("Parser already closed")
        self._buffer += self._decoder.decode(data)

        events: list[ResearchStreamEvent] = []
        while True:
            end = self._buffer.find(FRAME_DELIMITER)
            if end < 0:
                break
            frame = self._buffer[:end]
            self._buffer = self._buffer[end + len(FRAME_DELIMITER) :]
            events.extend(self._parse_frame(frame))
        return events

    def close(self) -> list[ResearchStreamEvent]:
        """Flush the decoder and parse any unterminated trailing frame."""
        if self._closed:
            return []
        self._closed = True
        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        if not remainder.strip():
            return []
        return self._parse_frame(remainder)

    @property
    def pending(self) -> str:
        """Text received but not yet part of a complete frame."""
        return self._buffer

    def _parse_frame(self, frame: str) -> list[ResearchStreamEvent]:
        events: list[ResearchStreamEvent] = []
        for line in frame.split("\n"):
            line = line.removesuffix("\r")
            if not line.startswith(DATA_PREFIX):
                continue
            payload = line[len(DATA_PREFIX) :]
            event = self._parse_event(payload)
            if event is not None:
                events.append(event)
        return events

    def _parse_event(self, payload: str) -> ResearchStreamEvent | None:
        try:
            event = research_event_adapter.validate_python(json.loads(payload))
        except (json.JSONDecodeError, ValidationError) as e:
            self.events_dropped += 1
            logger.warning(
                "Dropping malformed stream event",
                extra={
                    "payload": payload[:200],
                    "error": str(e).splitlines()[0],
                    "events_dropped": self.events_dropped,
                },
            )
            return None
        self.events_parsed += 1
        return event


def iter_sse_events(
    chunks: Iterable[bytes], parser: SSEFrameParser | None = None
) -> Iterator[ResearchStreamEvent]:
    """Yield events from an iterable of raw byte chunks.

    Each event is yielded as soon as its frame is complete. Exceptions raised by
    ``chunks`` propagate to the caller after all previously completed events
    have been yielded.
    """
    parser = parser or SSEFrameParser()
    for chunk in chunks:
        if not chunk:
            continue
        yield from parser.feed(chunk)
    yield from parser.close()
    logger.info(
        "Event stream ended",
        extra={"events_parsed": parser.events_parsed, "events_dropped": parser.events_dropped},
    )


def format_sse_event(event: BaseModel | dict[str, object]) -> str:
    """Serialise one event as a complete ``data:`` frame."""
    if isinstance(event, dict):
        payload = event
    else:
        payload = event.model_dump(mode="json", by_alias=True, exclude_none=True)
    return f"{DATA_PREFIX}{json.dumps(payload, ensure_ascii=False)}{FRAME_DELIMITER}"
