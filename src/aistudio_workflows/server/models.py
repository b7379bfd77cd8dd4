"""Request and response bodies for the REST server.

Request bodies reuse the workflow input records and add an optional
``workflowId`` that pins a specific implementation.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from aistudio_workflows.workflows.models import (
    AgentQuery,
    ContentInput,
    ImageEditInput,
    ImageGenerateInput,
    MetadataInput,
    MetadataOperation,
    ResearchStreamOptions,
    TaskType,
    WireModel,
)
from aistudio_workflows.workflows.types import WorkflowDescriptor


class ResearchRequest(AgentQuery):
    workflow_id: str | None = None


class ResearchStreamRequest(ResearchStreamOptions):
    workflow_id: str | None = None


class MetadataRequest(MetadataInput):
    operations: list[MetadataOperation] = Field(min_length=1)
    workflow_id: str | None = None


class ContentRequest(ContentInput):
    workflow_id: str | None = None


class ImageGenerateRequest(ImageGenerateInput):
    workflow_id: str | None = None


class ImageEditRequest(ImageEditInput):
    workflow_id: str | None = None


class BulkRequest(WireModel):
    article_count: int = Field(ge=0)
    post_count: int = Field(ge=0)
    knowledge_summary: str
    workflow_id: str | None = None


class TaskRequest(WireModel):
    task_type: TaskType
    params: dict[str, Any] = Field(default_factory=dict)
    workflow_id: str | None = None


class SetDefaultRequest(WireModel):
    workflow_id: str


class WorkflowInfo(WireModel):
    type: str
    id: str
    name: str
    description: str
    available: bool
    is_default: bool

    @classmethod
    def from_descriptor(
        cls, descriptor: WorkflowDescriptor, *, available: bool, is_default: bool
    ) -> WorkflowInfo:
        return cls(
            type=descriptor.type.value,
            id=descriptor.id,
            name=descriptor.name,
            description=descriptor.description,
            available=available,
            is_default=is_default,
        )


class ErrorBody(WireModel):
    error: str
    code: str
    retryable: bool = False
