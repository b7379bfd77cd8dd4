"""Bulk content workflow implementations."""

from aistudio_workflows.workflows.bulk.builtin import BuiltinBulkWorkflow

__all__ = ["BuiltinBulkWorkflow"]
