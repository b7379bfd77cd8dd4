"""LLM package initialization."""

from aistudio_workflows.llm.factory import LLMFactory
from aistudio_workflows.llm.provider import GeneratedImage, LLMProvider

__all__ = [
    "GeneratedImage",
    "LLMFactory",
    "LLMProvider",
]
