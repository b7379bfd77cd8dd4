"""Workflow REST API.

All routes are mounted under ``/api``. Handlers resolve a workflow through the
registry stored on ``app.state`` and delegate to it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from aistudio_workflows.server.models import (
    BulkRequest,
    ContentRequest,
    ImageEditRequest,
    ImageGenerateRequest,
    MetadataRequest,
    ResearchRequest,
    ResearchStreamRequest,
    SetDefaultRequest,
    TaskRequest,
    WorkflowInfo,
)
from aistudio_workflows.workflows.models import (
    AgentResponse,
    BulkContentResult,
    ImageEditResult,
    ImageGenerationResult,
    MetadataResults,
    RefineContentResult,
)
from aistudio_workflows.workflows.registry import (
    WorkflowRegistry,
    get_bulk_workflow,
    get_content_workflow,
    get_image_workflow,
    get_metadata_workflow,
    get_research_workflow,
    get_task_workflow,
)
from aistudio_workflows.workflows.sse import format_sse_event
from aistudio_workflows.workflows.types import Workflow, WorkflowType

logger = logging.getLogger(__name__)

router = APIRouter()

W = TypeVar("W", bound=Workflow)

SSE_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}


def _registry(request: Request) -> WorkflowRegistry:
    registry = getattr(request.app.state, "registry", None)
    if not isinstance(registry, WorkflowRegistry):
        raise HTTPException(status_code=500, detail="Workflow registry not configured")
    return registry


def _resolve(
    request: Request,
    accessor: Callable[[WorkflowRegistry, str | None], W | None],
    wf_type: WorkflowType,
    workflow_id: str | None,
) -> W:
    workflow = accessor(_registry(request), workflow_id)
    if workflow is None:
        if workflow_id:
            raise HTTPException(
                status_code=404, detail=f"No {wf_type.value} workflow with id '{workflow_id}'"
            )
        raise HTTPException(status_code=503, detail=f"No {wf_type.value} workflow is available")
    if workflow_id and not workflow.is_available():
        raise HTTPException(
            status_code=503, detail=f"{wf_type.value} workflow '{workflow_id}' is not configured"
        )
    return workflow


def _sse(frames: Iterator[str]) -> StreamingResponse:
    return StreamingResponse(frames, media_type="text/event-stream", headers=SSE_HEADERS)


def _parse_type(value: str) -> WorkflowType:
    try:
        return WorkflowType(value)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown workflow type '{value}'") from None


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/workflows")
def list_workflows(request: Request) -> dict[str, Any]:
    registry = _registry(request)
    stats = registry.get_stats()
    workflows = []
    for wf in registry.get_all():
        descriptor = wf.descriptor()
        workflows.append(
            WorkflowInfo.from_descriptor(
                descriptor,
                available=wf.is_available(),
                is_default=stats[descriptor.type.value].default == descriptor.id,
            ).to_wire()
        )
    return {
        "stats": {name: s.model_dump() for name, s in stats.items()},
        "workflows": workflows,
    }


@router.put("/workflows/{wf_type}/default")
def set_default_workflow(wf_type: str, req: SetDefaultRequest, request: Request) -> dict[str, str]:
    parsed = _parse_type(wf_type)
    if not _registry(request).set_default(parsed, req.workflow_id):
        raise HTTPException(
            status_code=404, detail=f"No {parsed.value} workflow with id '{req.workflow_id}'"
        )
    return {"type": parsed.value, "default": req.workflow_id}


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.post("/research")
def research(req: ResearchRequest, request: Request) -> dict[str, Any]:
    workflow = _resolve(request, get_research_workflow, WorkflowType.RESEARCH, req.workflow_id)
    result: AgentResponse = workflow.execute(req)
    return _dump(result)


@router.post("/research/stream")
def research_stream(req: ResearchStreamRequest, request: Request) -> StreamingResponse:
    workflow = _resolve(request, get_research_workflow, WorkflowType.RESEARCH, req.workflow_id)

    def frames() -> Iterator[str]:
        for event in workflow.execute_stream(req):
            yield format_sse_event(event)

    return _sse(frames())


@router.post("/metadata")
def metadata(req: MetadataRequest, request: Request) -> dict[str, Any]:
    workflow = _resolve(request, get_metadata_workflow, WorkflowType.METADATA, req.workflow_id)
    result: MetadataResults = workflow.generate(req.operations, req)
    return _dump(result)


@router.post("/content")
def content(req: ContentRequest, request: Request) -> dict[str, Any]:
    workflow = _resolve(request, get_content_workflow, WorkflowType.CONTENT, req.workflow_id)
    result: RefineContentResult = workflow.execute(req)
    return _dump(result)


@router.post("/content/stream")
def content_stream(req: ContentRequest, request: Request) -> StreamingResponse:
    workflow = _resolve(request, get_content_workflow, WorkflowType.CONTENT, req.workflow_id)

    def frames() -> Iterator[str]:
        # Headers are already sent once streaming starts; report failures in-band.
        try:
            for chunk in workflow.execute_stream(req):
                yield format_sse_event(chunk)
        except Exception as e:
            logger.exception("Content stream failed")
            yield format_sse_event({"type": "error", "error": str(e) or "Unknown error occurred"})

    return _sse(frames())


@router.post("/images/generate")
def generate_image(req: ImageGenerateRequest, request: Request) -> dict[str, Any]:
    workflow = _resolve(request, get_image_workflow, WorkflowType.IMAGE, req.workflow_id)
    result: ImageGenerationResult = workflow.generate(req)
    return _dump(result)


@router.post("/images/edit")
def edit_image(req: ImageEditRequest, request: Request) -> dict[str, Any]:
    workflow = _resolve(request, get_image_workflow, WorkflowType.IMAGE, req.workflow_id)
    result: ImageEditResult = workflow.edit(req)
    return _dump(result)


@router.post("/bulk")
def bulk(req: BulkRequest, request: Request) -> dict[str, Any]:
    workflow = _resolve(request, get_bulk_workflow, WorkflowType.BULK, req.workflow_id)
    result: BulkContentResult = workflow.generate_bulk_content(
        req.article_count, req.post_count, req.knowledge_summary
    )
    return _dump(result)


@router.post("/tasks")
def run_task(req: TaskRequest, request: Request) -> dict[str, Any]:
    workflow = _resolve(request, get_task_workflow, WorkflowType.TASK, req.workflow_id)
    return workflow.execute_task(req.task_type, req.params)
