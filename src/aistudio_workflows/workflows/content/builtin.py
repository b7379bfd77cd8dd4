"""Built-in content refinement workflow."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from aistudio_workflows.llm.provider import LLMProvider
from aistudio_workflows.workflows.models import (
    ContentDelta,
    ContentDone,
    ContentInput,
    ContentStreamChunk,
    RefineContentResult,
)
from aistudio_workflows.workflows.structured import (
    format_history,
    parse_model_output,
    strip_code_fences,
)
from aistudio_workflows.workflows.types import ContentWorkflow

logger = logging.getLogger(__name__)

DEFAULT_CHAT_RESPONSE = "Here is the updated draft."
OFFLINE_CHAT_RESPONSE = "No language model is configured, so the draft was left unchanged."


def build_content_prompt(content_input: ContentInput, task: str) -> str:
    history = format_history(content_input.history, assistant_label="AI")
    return f'''Current Content:
"""
{content_input.current_content or "(No content yet)"}
"""

Previous Conversation History:
"""
{history or "(No history)"}
"""

User Instruction: "{content_input.instruction}"

Task:
{task}'''


def _system_prompt(content_input: ContentInput) -> str:
    return (
        f"You are an expert content creator helping a user write a "
        f"{content_input.content_type.value}. Always generate high-quality, engaging content."
    )


class BuiltinContentWorkflow(ContentWorkflow):
    """Refines or generates drafts with the configured LLM provider."""

    id = "builtin"
    name = "Built-in Content"
    description = "Handles content creation and refinement with the configured language model"

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self._llm = llm

    def is_available(self) -> bool:
        return True

    def execute(self, content_input: ContentInput) -> RefineContentResult:
        logger.info(
            "Refining content",
            extra={
                "content_type": content_input.content_type.value,
                "instruction": content_input.instruction[:50],
            },
        )
        if self._llm is None:
            return RefineContentResult(
                content=content_input.current_content, chat_response=OFFLINE_CHAT_RESPONSE
            )

        prompt = build_content_prompt(
            content_input,
            "1. Generate or update the content based on the instruction and context.\n"
            "2. Provide a very brief, encouraging response to the user about what you "
            "changed (max 1 sentence).\n"
            'Respond with JSON: {"content": "...", "chatResponse": "..."}',
        )
        text = self._llm.chat(
            [
                {"role": "system", "content": _system_prompt(content_input)},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
        )
        parsed = parse_model_output(text, RefineContentResult)
        if parsed is None:
            # Unstructured answer: treat the whole reply as the draft.
            return RefineContentResult(
                content=strip_code_fences(text) or content_input.current_content,
                chat_response=DEFAULT_CHAT_RESPONSE,
            )
        return RefineContentResult(
            content=parsed.content or content_input.current_content,
            chat_response=parsed.chat_response or DEFAULT_CHAT_RESPONSE,
        )

    def execute_stream(self, content_input: ContentInput) -> Iterator[ContentStreamChunk]:
        logger.info(
            "Streaming content", extra={"content_type": content_input.content_type.value}
        )
        if self._llm is None:
            yield ContentDone(
                content=content_input.current_content, chat_response=OFFLINE_CHAT_RESPONSE
            )
            return

        prompt = build_content_prompt(
            content_input,
            "Generate or update the content based on the instruction and context.\n"
            "Output ONLY the content, nothing else.",
        )
        messages = [
            {"role": "system", "content": _system_prompt(content_input)},
            {"role": "user", "content": prompt},
        ]
        parts: list[str] = []
        try:
            for fragment in self._llm.stream_chat(messages):
                parts.append(fragment)
                yield ContentDelta(content=fragment)
        except Exception:
            logger.exception("Streaming content failed")
            raise
        yield ContentDone(content="".join(parts), chat_response=DEFAULT_CHAT_RESPONSE)
