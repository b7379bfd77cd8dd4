"""Workflow contracts, registry and implementations."""

from aistudio_workflows.workflows.bootstrap import initialize_workflows
from aistudio_workflows.workflows.bulk import BuiltinBulkWorkflow
from aistudio_workflows.workflows.content import BuiltinContentWorkflow
from aistudio_workflows.workflows.image import BuiltinImageWorkflow, ImageRouterWorkflow
from aistudio_workflows.workflows.metadata import BuiltinMetadataWorkflow
from aistudio_workflows.workflows.registry import (
    WorkflowRegistry,
    get_bulk_workflow,
    get_content_workflow,
    get_image_workflow,
    get_metadata_workflow,
    get_research_workflow,
    get_task_workflow,
)
from aistudio_workflows.workflows.research import (
    BuiltinResearchWorkflow,
    WebhookResearchWorkflow,
)
from aistudio_workflows.workflows.task import BuiltinTaskWorkflow
from aistudio_workflows.workflows.types import (
    BulkWorkflow,
    ContentWorkflow,
    ImageWorkflow,
    MetadataWorkflow,
    ResearchWorkflow,
    TaskWorkflow,
    Workflow,
    WorkflowType,
)

__all__ = [
    "BuiltinBulkWorkflow",
    "BuiltinContentWorkflow",
    "BuiltinImageWorkflow",
    "BuiltinMetadataWorkflow",
    "BuiltinResearchWorkflow",
    "BuiltinTaskWorkflow",
    "BulkWorkflow",
    "ContentWorkflow",
    "ImageRouterWorkflow",
    "ImageWorkflow",
    "MetadataWorkflow",
    "ResearchWorkflow",
    "TaskWorkflow",
    "WebhookResearchWorkflow",
    "Workflow",
    "WorkflowRegistry",
    "WorkflowType",
    "get_bulk_workflow",
    "get_content_workflow",
    "get_image_workflow",
    "get_metadata_workflow",
    "get_research_workflow",
    "get_task_workflow",
    "initialize_workflows",
]
