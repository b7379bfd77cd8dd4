"""Core package initialization."""

from aistudio_workflows.core.config import AIStudioConfig

__all__ = [
    "AIStudioConfig",
]
