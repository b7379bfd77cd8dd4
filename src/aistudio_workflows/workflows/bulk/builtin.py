"""Built-in bulk content workflow."""

from __future__ import annotations

import logging

from aistudio_workflows.llm.provider import LLMProvider
from aistudio_workflows.workflows.models import BulkContentResult
from aistudio_workflows.workflows.structured import parse_model_output
from aistudio_workflows.workflows.types import BulkWorkflow

logger = logging.getLogger(__name__)

BULK_SYSTEM_PROMPT = (
    "You are a content strategist generating multiple pieces of content based on the "
    "provided knowledge summary. Respond with JSON: "
    '{"articles": [{"title": "...", "content": "..."}], '
    '"posts": [{"platform": "...", "caption": "..."}]}'
)


class BuiltinBulkWorkflow(BulkWorkflow):
    """Generates batches of articles and social posts."""

    id = "builtin"
    name = "Built-in Bulk"
    description = "Handles bulk content generation with the configured language model"

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self._llm = llm

    def is_available(self) -> bool:
        return True

    def generate_bulk_content(
        self, article_count: int, post_count: int, knowledge_summary: str
    ) -> BulkContentResult:
        logger.info(
            "Generating bulk content",
            extra={"article_count": article_count, "post_count": post_count},
        )
        if self._llm is None or (article_count <= 0 and post_count <= 0):
            return BulkContentResult()

        text = self._llm.chat(
            [
                {"role": "system", "content": BULK_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"Generate {article_count} articles and {post_count} social "
                    f"media posts based on: {knowledge_summary}",
                },
            ],
            response_format={"type": "json_object"},
        )
        return parse_model_output(text, BulkContentResult) or BulkContentResult()
