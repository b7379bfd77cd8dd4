"""Workflow registry.

Catalogue of workflow implementations keyed by ``(capability, id)`` with one
default implementation per capability. The registry is an ordinary object owned
by whoever bootstraps the application; tests build a fresh one per case.

Reads take no lock: after bootstrap the maps are effectively read-only.
Mutations (``register``, ``set_default``, ``unregister``, ``clear``) are
serialised so administrative changes at runtime cannot interleave.
"""

from __future__ import annotations

import logging
import threading
from typing import TypeVar, cast

from pydantic import BaseModel

from aistudio_workflows.workflows.types import (
    WORKFLOW_CLASSES,
    BulkWorkflow,
    ContentWorkflow,
    ImageWorkflow,
    MetadataWorkflow,
    ResearchWorkflow,
    TaskWorkflow,
    Workflow,
    WorkflowType,
)

logger = logging.getLogger(__name__)

W = TypeVar("W", bound=Workflow)


class WorkflowTypeStats(BaseModel):
    count: int
    default: str | None
    available: int


class WorkflowRegistry:
    """Registry for AI workflow implementations."""

    def __init__(self) -> None:
        self._workflows: dict[tuple[WorkflowType, str], Workflow] = {}
        self._defaults: dict[WorkflowType, str] = {}
        self._lock = threading.RLock()

    def register(self, workflow: Workflow, make_default: bool = False) -> None:
        """Register a workflow implementation.

        Re-registering an existing ``(type, id)`` overwrites it. The workflow
        becomes the default if requested or if its capability has no default yet.

        Raises:
            TypeError: If ``workflow`` does not implement its declared capability.
        """
        wf_type = WorkflowType(workflow.type)
        if not isinstance(workflow, WORKFLOW_CLASSES[wf_type]):
            raise TypeError(
                f"{workflow!r} does not implement {WORKFLOW_CLASSES[wf_type].__name__}"
            )
        key = (wf_type, workflow.id)
        with self._lock:
            if key in self._workflows:
                logger.warning(
                    "Workflow already registered, overwriting",
                    extra={"workflow_type": wf_type.value, "workflow_id": workflow.id},
                )
            self._workflows[key] = workflow
            logger.info(
                "Registered workflow",
                extra={
                    "workflow_type": wf_type.value,
                    "workflow_id": workflow.id,
                    "workflow_name": workflow.name,
                },
            )

            if make_default or wf_type not in self._defaults:
                self._defaults[wf_type] = workflow.id
                logger.info(
                    "Set default workflow",
                    extra={"workflow_type": wf_type.value, "workflow_id": workflow.id},
                )

    def get(self, wf_type: WorkflowType | str, workflow_id: str) -> Workflow | None:
        """Exact lookup; returns None when not registered."""
        return self._workflows.get((WorkflowType(wf_type), workflow_id))

    def get_default(self, wf_type: WorkflowType | str) -> Workflow | None:
        wf_type = WorkflowType(wf_type)
        default_id = self._defaults.get(wf_type)
        if default_id is None:
            return None
        return self.get(wf_type, default_id)

    def get_available(self, wf_type: WorkflowType | str) -> Workflow | None:
        """Resolve a usable implementation.

        The default wins if it is available; otherwise the first available
        implementation in registration order is returned.
        """
        wf_type = WorkflowType(wf_type)
        default = self.get_default(wf_type)
        if default is not None and default.is_available():
            return default

        for workflow in self.get_all_of_type(wf_type):
            if workflow.is_available():
                if default is not None:
                    logger.debug(
                        "Default workflow unavailable, falling back",
                        extra={
                            "workflow_type": wf_type.value,
                            "default_id": default.id,
                            "fallback_id": workflow.id,
                        },
                    )
                return workflow
        return None

    def get_workflow(
        self, wf_type: WorkflowType | str, workflow_id: str | None = None
    ) -> Workflow | None:
        """Pinned lookup when ``workflow_id`` is given, otherwise best available."""
        if workflow_id:
            return self.get(wf_type, workflow_id)
        return self.get_available(wf_type)

    def set_default(self, wf_type: WorkflowType | str, workflow_id: str) -> bool:
        """Make a registered workflow the default; returns False if it is unknown."""
        wf_type = WorkflowType(wf_type)
        with self._lock:
            if (wf_type, workflow_id) not in self._workflows:
                logger.warning(
                    "Cannot set default: workflow not found",
                    extra={"workflow_type": wf_type.value, "workflow_id": workflow_id},
                )
                return False
            self._defaults[wf_type] = workflow_id
        logger.info(
            "Set default workflow",
            extra={"workflow_type": wf_type.value, "workflow_id": workflow_id},
        )
        return True

    def get_all_of_type(self, wf_type: WorkflowType | str) -> list[Workflow]:
        wf_type = WorkflowType(wf_type)
        return [wf for (t, _), wf in list(self._workflows.items()) if t is wf_type]

    def get_all(self) -> list[Workflow]:
        return list(self._workflows.values())

    def has(self, wf_type: WorkflowType | str, workflow_id: str) -> bool:
        return (WorkflowType(wf_type), workflow_id) in self._workflows

    def unregister(self, wf_type: WorkflowType | str, workflow_id: str) -> bool:
        """Remove a workflow; returns whether it existed.

        If it was the default, the first remaining implementation of the same
        capability is promoted, or the default is cleared when none remain.
        """
        wf_type = WorkflowType(wf_type)
        with self._lock:
            existed = self._workflows.pop((wf_type, workflow_id), None) is not None
            if existed and self._defaults.get(wf_type) == workflow_id:
                del self._defaults[wf_type]
                remaining = self.get_all_of_type(wf_type)
                if remaining:
                    self._defaults[wf_type] = remaining[0].id
                    logger.info(
                        "Promoted workflow to default",
                        extra={"workflow_type": wf_type.value, "workflow_id": remaining[0].id},
                    )
        if existed:
            logger.info(
                "Unregistered workflow",
                extra={"workflow_type": wf_type.value, "workflow_id": workflow_id},
            )
        return existed

    def clear(self) -> None:
        with self._lock:
            self._workflows.clear()
            self._defaults.clear()

    def get_stats(self) -> dict[str, WorkflowTypeStats]:
        stats: dict[str, WorkflowTypeStats] = {}
        for wf_type in WorkflowType:
            workflows = self.get_all_of_type(wf_type)
            stats[wf_type.value] = WorkflowTypeStats(
                count=len(workflows),
                default=self._defaults.get(wf_type),
                available=sum(1 for wf in workflows if wf.is_available()),
            )
        return stats


def _typed(workflow: Workflow | None, expected: type[W]) -> W | None:
    if workflow is None:
        return None
    if not isinstance(workflow, expected):
        raise TypeError(f"{workflow!r} does not implement {expected.__name__}")
    return cast(W, workflow)


def get_research_workflow(
    registry: WorkflowRegistry, workflow_id: str | None = None
) -> ResearchWorkflow | None:
    return _typed(registry.get_workflow(WorkflowType.RESEARCH, workflow_id), ResearchWorkflow)


def get_metadata_workflow(
    registry: WorkflowRegistry, workflow_id: str | None = None
) -> MetadataWorkflow | None:
    return _typed(registry.get_workflow(WorkflowType.METADATA, workflow_id), MetadataWorkflow)


def get_content_workflow(
    registry: WorkflowRegistry, workflow_id: str | None = None
) -> ContentWorkflow | None:
    return _typed(registry.get_workflow(WorkflowType.CONTENT, workflow_id), ContentWorkflow)


def get_image_workflow(
    registry: WorkflowRegistry, workflow_id: str | None = None
) -> ImageWorkflow | None:
    return _typed(registry.get_workflow(WorkflowType.IMAGE, workflow_id), ImageWorkflow)


def get_bulk_workflow(
    registry: WorkflowRegistry, workflow_id: str | None = None
) -> BulkWorkflow | None:
    return _typed(registry.get_workflow(WorkflowType.BULK, workflow_id), BulkWorkflow)


def get_task_workflow(
    registry: WorkflowRegistry, workflow_id: str | None = None
) -> TaskWorkflow | None:
    return _typed(registry.get_workflow(WorkflowType.TASK, workflow_id), TaskWorkflow)
