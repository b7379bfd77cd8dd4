"""Content workflow implementations."""

from aistudio_workflows.workflows.content.builtin import BuiltinContentWorkflow

__all__ = ["BuiltinContentWorkflow"]
