"""Webhook research workflow.

Forwards research requests to an external HTTP service. The non-streaming call
expects a single JSON answer; the streaming call consumes a Server-Sent-Events
response and re-emits its events.

Failure handling differs on purpose between the two entry points:

* :meth:`WebhookResearchWorkflow.execute` raises (``WebhookError`` on a non-2xx
  status, ``AIServiceError`` on transport failure).
* :meth:`WebhookResearchWorkflow.execute_stream` never raises; every failure is
  reported as one terminal ``error`` event.

No read timeout is applied unless ``read_timeout_seconds`` is configured; a hung
remote stream otherwise blocks its consumer indefinitely.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import requests
from pydantic import ValidationError

from aistudio_workflows.errors import (
    InvalidResponseError,
    WebhookError,
    WorkflowUnavailableError,
    provider_errors,
)
from aistudio_workflows.workflows.models import (
    TERMINAL_EVENT_TYPES,
    AgentQuery,
    AgentResponse,
    ErrorEvent,
    ResearchStreamEvent,
    ResearchStreamOptions,
)
from aistudio_workflows.workflows.sse import SSEFrameParser, iter_sse_events
from aistudio_workflows.workflows.types import ResearchWorkflow

logger = logging.getLogger(__name__)

_QUERY_FIELDS = {"query", "channel_id", "history", "notebook_id", "models"}
_STREAM_FIELDS = _QUERY_FIELDS | {"verbose", "search_web"}


def _read_error_body(response: requests.Response) -> str:
    try:
        return response.text or "Unknown error"
    except (requests.RequestException, UnicodeDecodeError):
        return "Unknown error"


class WebhookResearchWorkflow(ResearchWorkflow):
    """Webhook-based research workflow."""

    id = "webhook"
    name = "Webhook Research"
    description = "Forwards research requests to an external webhook service"

    def __init__(
        self,
        webhook_url: str | None = None,
        *,
        session: requests.Session | None = None,
        connect_timeout_seconds: float = 10.0,
        read_timeout_seconds: float | None = None,
    ) -> None:
        self._webhook_url = (webhook_url or "").strip()
        self._session = session or requests.Session()
        self._timeout = (connect_timeout_seconds, read_timeout_seconds)

    @property
    def webhook_url(self) -> str:
        return self._webhook_url

    def is_available(self) -> bool:
        return bool(self._webhook_url)

    def _post(self, body: dict[str, Any], accept: str, stream: bool) -> requests.Response:
        return self._session.post(
            self._webhook_url,
            json=body,
            headers={"Content-Type": "application/json", "Accept": accept},
            stream=stream,
            timeout=self._timeout,
        )

    def execute(self, query: AgentQuery) -> AgentResponse:
        if not self.is_available():
            raise WorkflowUnavailableError("Webhook research workflow is not configured")

        logger.info(
            "Webhook research query",
            extra={"query": query.query[:50], "url": self._webhook_url},
        )

        body = query.model_dump(
            mode="json", by_alias=True, exclude_none=True, include=_QUERY_FIELDS
        )
        with provider_errors("WebhookResearchWorkflow.execute"):
            response = self._post(body, accept="application/json", stream=False)

        if not response.ok:
            error_text = _read_error_body(response)
            logger.error(
                "Webhook request failed",
                extra={"status_code": response.status_code, "body": error_text[:500]},
            )
            raise WebhookError(response.status_code, error_text)

        try:
            result = AgentResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise InvalidResponseError(f"Webhook returned an invalid response: {e}") from e

        logger.info(
            "Webhook research response received",
            extra={"sources": len(result.sources or [])},
        )
        return result

    def execute_stream(self, options: ResearchStreamOptions) -> Iterator[ResearchStreamEvent]:
        if not self.is_available():
            yield ErrorEvent(error="Webhook research workflow is not configured")
            return

        logger.info(
            "Webhook research stream",
            extra={
                "query": options.query[:50],
                "verbose": options.verbose,
                "search_web": options.search_web,
                "url": self._webhook_url,
            },
        )

        body = options.model_dump(
            mode="json", by_alias=True, exclude_none=True, include=_STREAM_FIELDS
        )
        try:
            response = self._post(body, accept="text/event-stream", stream=True)
        except requests.RequestException as e:
            logger.error("Webhook streaming request failed", extra={"error": str(e)})
            yield ErrorEvent(error=f"Webhook request failed: {e}")
            return

        # The connection is released exactly once, on completion, error, or
        # when the consumer stops iterating (GeneratorExit).
        try:
            if not response.ok:
                error_text = _read_error_body(response)
                logger.error(
                    "Webhook streaming request failed",
                    extra={"status_code": response.status_code, "body": error_text[:500]},
                )
                yield ErrorEvent(
                    error=(
                        f"Webhook request failed with status {response.status_code}: {error_text}"
                    )
                )
                return

            # 204 is the only success status that carries no body to stream.
            if response.status_code == 204:
                logger.error("Webhook response has no body")
                yield ErrorEvent(error="Webhook response has no body")
                return

            terminated = False
            parser = SSEFrameParser(encoding="utf-8")
            try:
                for event in iter_sse_events(response.iter_content(chunk_size=None), parser):
                    terminated = terminated or event.type in TERMINAL_EVENT_TYPES
                    yield event
            except Exception as e:
                logger.exception("Error reading webhook stream")
                yield ErrorEvent(error=str(e) or "Error reading webhook stream")
                return

            stats = {
                "workflow_type": self.type.value,
                "workflow_id": self.id,
                "events_parsed": parser.events_parsed,
                "events_dropped": parser.events_dropped,
            }
            if terminated:
                logger.info("Webhook research stream completed", extra=stats)
            else:
                # Ends without an extra event; an empty stream yields nothing.
                logger.warning("Webhook stream ended without a terminal event", extra=stats)
        finally:
            response.close()
