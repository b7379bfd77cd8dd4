"""Registry bootstrap.

Builds a registry holding every builtin workflow as the default for its
capability, then registers and promotes externally backed implementations
that are configured.
"""

from __future__ import annotations

import logging

from aistudio_workflows.core.config import AIStudioConfig
from aistudio_workflows.llm.factory import LLMFactory
from aistudio_workflows.llm.provider import LLMProvider
from aistudio_workflows.workflows.bulk import BuiltinBulkWorkflow
from aistudio_workflows.workflows.content import BuiltinContentWorkflow
from aistudio_workflows.workflows.image import BuiltinImageWorkflow, ImageRouterWorkflow
from aistudio_workflows.workflows.metadata import BuiltinMetadataWorkflow
from aistudio_workflows.workflows.registry import WorkflowRegistry
from aistudio_workflows.workflows.research import (
    BuiltinResearchWorkflow,
    WebhookResearchWorkflow,
)
from aistudio_workflows.workflows.task import BuiltinTaskWorkflow
from aistudio_workflows.workflows.types import WorkflowType

logger = logging.getLogger(__name__)


def initialize_workflows(
    config: AIStudioConfig | None = None,
    llm: LLMProvider | None = None,
    registry: WorkflowRegistry | None = None,
) -> WorkflowRegistry:
    """Register all workflow implementations.

    Args:
        config: Settings; loaded from the environment when omitted.
        llm: Provider for builtin workflows. When omitted one is created from
            ``config.llm``; builtins run offline if none can be created.
        registry: Registry to populate; a fresh one is created when omitted.

    Returns:
        The populated registry.
    """
    config = config or AIStudioConfig()
    registry = registry if registry is not None else WorkflowRegistry()
    if llm is None:
        llm = LLMFactory.create(config.llm)

    logger.info("Initializing AI workflows", extra={"llm_configured": llm is not None})

    registry.register(BuiltinResearchWorkflow(llm), make_default=True)
    webhook = WebhookResearchWorkflow(
        config.research.webhook_url,
        connect_timeout_seconds=config.research.connect_timeout_seconds,
        read_timeout_seconds=config.research.read_timeout_seconds,
    )
    if webhook.is_available():
        registry.register(webhook)
        registry.set_default(WorkflowType.RESEARCH, webhook.id)
        logger.info("Webhook research workflow is available and set as default")

    registry.register(BuiltinMetadataWorkflow(llm), make_default=True)
    registry.register(BuiltinContentWorkflow(llm), make_default=True)

    registry.register(BuiltinImageWorkflow(llm), make_default=True)
    image_router = ImageRouterWorkflow(config.image_router)
    if image_router.is_available():
        registry.register(image_router)
        registry.set_default(WorkflowType.IMAGE, image_router.id)
        logger.info("ImageRouter workflow is available and set as default for images")
    elif llm is None:
        logger.warning("No image provider configured; image generation will not be available")

    registry.register(BuiltinBulkWorkflow(llm), make_default=True)
    registry.register(BuiltinTaskWorkflow(llm), make_default=True)

    stats = {name: s.model_dump() for name, s in registry.get_stats().items()}
    logger.info("Workflow registration complete", extra={"stats": stats})
    return registry
