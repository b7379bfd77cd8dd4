"""Built-in task workflow for creating drafts."""

from __future__ import annotations

import logging
from typing import Any

from aistudio_workflows.errors import WorkflowUnavailableError
from aistudio_workflows.llm.provider import LLMProvider
from aistudio_workflows.workflows.models import TaskType
from aistudio_workflows.workflows.types import TaskWorkflow

logger = logging.getLogger(__name__)


def build_task_prompt(task_type: TaskType, params: dict[str, Any]) -> str:
    """Render the generation prompt for ``task_type``."""
    if task_type is TaskType.CREATE_ARTICLE_DRAFT:
        return f"""Create a blog article with the following requirements:
Title: {params.get("title") or "Generate an appropriate title"}
Topic: {params.get("topic") or "Based on context"}
Content guidelines: {params.get("guidelines") or "Professional, informative, engaging"}

Generate the full HTML content for the article body."""

    if task_type is TaskType.CREATE_POST_DRAFT:
        return f"""Create a social media post:
Platform: {params.get("platform") or "Instagram"}
Topic: {params.get("topic") or "Based on context"}
Tone: {params.get("tone") or "Engaging and authentic"}

Generate the caption with emojis and relevant hashtags."""

    return f"""Generate a detailed image prompt:
Subject: {params.get("subject") or "Based on context"}
Style: {params.get("style") or "Modern, professional"}

Create a detailed, specific prompt suitable for an image generation model."""


class BuiltinTaskWorkflow(TaskWorkflow):
    """Executes structured draft-creation tasks."""

    id = "builtin"
    name = "Built-in Task"
    description = "Handles structured task execution for creating drafts and content"

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self._llm = llm

    def is_available(self) -> bool:
        return True

    def execute_task(self, task_type: TaskType | str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            task = TaskType(task_type)
        except ValueError:
            raise ValueError(f"Unknown task type: {task_type}") from None

        logger.info("Executing task", extra={"task_type": task.value})
        prompt = build_task_prompt(task, params)
        if self._llm is None:
            raise WorkflowUnavailableError("No LLM provider is configured for task execution")

        result = self._llm.generate(prompt)
        return {"type": task.value, "result": result}
