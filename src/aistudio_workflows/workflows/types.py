"""Workflow contracts.

Workflows are grouped by capability (:class:`WorkflowType`). Each capability
may have several interchangeable implementations; callers resolve one through
the :class:`~aistudio_workflows.workflows.registry.WorkflowRegistry`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from aistudio_workflows.workflows.models import (
    AgentQuery,
    AgentResponse,
    BulkContentResult,
    ContentInput,
    ContentStreamChunk,
    ImageEditInput,
    ImageEditResult,
    ImageGenerateInput,
    ImageGenerationResult,
    MetadataInput,
    MetadataOperation,
    MetadataResults,
    RefineContentResult,
    ResearchStreamEvent,
    ResearchStreamOptions,
    TaskType,
)


class WorkflowType(str, Enum):
    RESEARCH = "research"
    METADATA = "metadata"
    CONTENT = "content"
    IMAGE = "image"
    BULK = "bulk"
    TASK = "task"


@dataclass(frozen=True, slots=True)
class WorkflowDescriptor:
    """Immutable identity of a workflow implementation."""

    type: WorkflowType
    id: str
    name: str
    description: str


class Workflow(ABC):
    """Base class for all workflow implementations.

    Subclasses declare their identity as class attributes; ``(type, id)`` must be
    unique within a registry.
    """

    type: ClassVar[WorkflowType]
    id: str
    name: str
    description: str

    @abstractmethod
    def is_available(self) -> bool:
        """Whether this workflow can be used with the current configuration."""

    def descriptor(self) -> WorkflowDescriptor:
        return WorkflowDescriptor(
            type=self.type, id=self.id, name=self.name, description=self.description
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type.value}:{self.id}>"


class ResearchWorkflow(Workflow):
    type = WorkflowType.RESEARCH

    @abstractmethod
    def execute(self, query: AgentQuery) -> AgentResponse:
        """Execute a research query (non-streaming).

        Raises:
            AIServiceError: On any failure; no partial result is returned.
        """

    @abstractmethod
    def execute_stream(self, options: ResearchStreamOptions) -> Iterator[ResearchStreamEvent]:
        """Execute a research query, yielding events as they arrive.

        Unlike :meth:`execute`, failures are reported as a terminal ``error``
        event; the iterator never raises.
        """


class MetadataWorkflow(Workflow):
    type = WorkflowType.METADATA

    @abstractmethod
    def generate(
        self, operations: Sequence[MetadataOperation], metadata_input: MetadataInput
    ) -> MetadataResults:
        """Generate the requested metadata fields for a piece of content."""


class ContentWorkflow(Workflow):
    type = WorkflowType.CONTENT

    @abstractmethod
    def execute(self, content_input: ContentInput) -> RefineContentResult:
        """Generate or refine content."""

    @abstractmethod
    def execute_stream(self, content_input: ContentInput) -> Iterator[ContentStreamChunk]:
        """Generate or refine content, yielding ``delta`` chunks then ``done``."""


class ImageWorkflow(Workflow):
    type = WorkflowType.IMAGE

    @abstractmethod
    def generate(self, image_input: ImageGenerateInput) -> ImageGenerationResult:
        """Generate a new image from a text description."""

    @abstractmethod
    def edit(self, image_input: ImageEditInput) -> ImageEditResult:
        """Edit an existing image with text instructions."""


class BulkWorkflow(Workflow):
    type = WorkflowType.BULK

    @abstractmethod
    def generate_bulk_content(
        self, article_count: int, post_count: int, knowledge_summary: str
    ) -> BulkContentResult:
        """Generate several articles and posts in one call."""


class TaskWorkflow(Workflow):
    type = WorkflowType.TASK

    @abstractmethod
    def execute_task(self, task_type: TaskType | str, params: dict[str, Any]) -> dict[str, Any]:
        """Execute a structured task.

        Raises:
            ValueError: If ``task_type`` is not a known task.
        """


WORKFLOW_CLASSES: dict[WorkflowType, type[Workflow]] = {
    WorkflowType.RESEARCH: ResearchWorkflow,
    WorkflowType.METADATA: MetadataWorkflow,
    WorkflowType.CONTENT: ContentWorkflow,
    WorkflowType.IMAGE: ImageWorkflow,
    WorkflowType.BULK: BulkWorkflow,
    WorkflowType.TASK: TaskWorkflow,
}
