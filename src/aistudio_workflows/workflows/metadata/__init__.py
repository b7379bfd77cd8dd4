"""Metadata workflow implementations."""

from aistudio_workflows.workflows.metadata.builtin import BuiltinMetadataWorkflow

__all__ = ["BuiltinMetadataWorkflow"]
