"""Research workflow implementations."""

from aistudio_workflows.workflows.research.builtin import BuiltinResearchWorkflow
from aistudio_workflows.workflows.research.webhook import WebhookResearchWorkflow

__all__ = ["BuiltinResearchWorkflow", "WebhookResearchWorkflow"]
