"""Built-in research workflow.

Answers research queries with the configured LLM provider. Without a provider
it answers offline with a fixed explanation, so the workflow is always
available and never touches the network in that mode.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from aistudio_workflows.llm.provider import LLMProvider
from aistudio_workflows.workflows.models import (
    AgentQuery,
    AgentResponse,
    DeltaEvent,
    DoneEvent,
    ErrorEvent,
    ResearchStreamEvent,
    ResearchStreamOptions,
    SourcesEvent,
    StatusEvent,
    find_references,
)
from aistudio_workflows.workflows.structured import format_history
from aistudio_workflows.workflows.types import ResearchWorkflow

logger = logging.getLogger(__name__)

OFFLINE_RESPONSE = (
    "Research is running without a language model, so I can't look this up right now. "
    "Configure an LLM provider or a research webhook to get answers."
)


def build_research_system_prompt(notebook_id: str | None, history: str) -> str:
    notebook = (
        f'## NOTEBOOK ID\nThe user is working in notebook "{notebook_id}".'
        if notebook_id
        else "## NOTE\nNo notebook was selected."
    )
    return f"""You are a Research Agent helping a content team.

{notebook}

## CONVERSATION HISTORY
{history or "(No prior conversation)"}

## RESPONSE GUIDELINES
- Answer directly; never describe your search process
- If sources conflict, present both perspectives with their sources
- If you lack information on the topic, say so instead of guessing
- Prefer depth over breadth and use Markdown for readability
- Never fabricate information

## CITATION FORMAT
Cite sources inline with `[[ref:id={{SOURCE_ID}}|name={{SOURCE_NAME}}|loc={{TYPE}}:{{VALUE}}]]`,
where `loc` is optional (line, page, chapter, section, timecode, anchor or index)."""


class BuiltinResearchWorkflow(ResearchWorkflow):
    """Built-in research workflow backed by the configured LLM provider."""

    id = "builtin"
    name = "Built-in Research"
    description = "Answers research queries with the configured language model"

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self._llm = llm

    def is_available(self) -> bool:
        return True

    def _messages(self, query: AgentQuery) -> list[dict[str, str]]:
        system = build_research_system_prompt(query.notebook_id, format_history(query.history))
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": query.query},
        ]

    def execute(self, query: AgentQuery) -> AgentResponse:
        logger.info("Builtin research query", extra={"query": query.query[:50]})

        if self._llm is None:
            return AgentResponse(response=OFFLINE_RESPONSE, steps=0)

        text = self._llm.chat(self._messages(query))
        sources = find_references(text)
        return AgentResponse(response=text, sources=sources or None, steps=1)

    def execute_stream(self, options: ResearchStreamOptions) -> Iterator[ResearchStreamEvent]:
        logger.info(
            "Builtin research stream",
            extra={"query": options.query[:50], "verbose": options.verbose},
        )
        yield StatusEvent(status="Starting research...")

        if self._llm is None:
            yield DeltaEvent(content=OFFLINE_RESPONSE)
            yield DoneEvent(response=OFFLINE_RESPONSE, steps=0)
            return

        yield StatusEvent(status="Generating answer...")
        parts: list[str] = []
        try:
            for fragment in self._llm.stream_chat(self._messages(options)):
                parts.append(fragment)
                yield DeltaEvent(content=fragment)
        except Exception as e:
            logger.exception("Research stream error")
            yield ErrorEvent(error=str(e) or "Unknown error occurred")
            return

        full_text = "".join(parts)
        sources = find_references(full_text)
        if sources:
            yield SourcesEvent(sources=sources)
        yield DoneEvent(response=full_text, sources=sources or None, steps=1)
