"""AI Studio workflows.

Pluggable AI capability registry for the content backend:
- interchangeable workflow implementations per capability
- runtime availability negotiation with default/fallback selection
- a streaming client for webhook-backed research services
"""

__version__ = "0.1.0"

from aistudio_workflows.core.config import AIStudioConfig
from aistudio_workflows.workflows.bootstrap import initialize_workflows
from aistudio_workflows.workflows.registry import WorkflowRegistry

__all__ = ["__version__", "AIStudioConfig", "WorkflowRegistry", "initialize_workflows"]
