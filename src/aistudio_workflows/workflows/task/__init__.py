"""Task workflow implementations."""

from aistudio_workflows.workflows.task.builtin import BuiltinTaskWorkflow

__all__ = ["BuiltinTaskWorkflow"]
