"""Image workflow implementations."""

from aistudio_workflows.workflows.image.builtin import BuiltinImageWorkflow
from aistudio_workflows.workflows.image.imagerouter import ImageRouterWorkflow

__all__ = ["BuiltinImageWorkflow", "ImageRouterWorkflow"]
