"""Test configuration and fixtures."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from aistudio_workflows.core.config import (
    AIStudioConfig,
    ImageRouterConfig,
    LLMConfig,
    ResearchWebhookConfig,
)
from aistudio_workflows.llm.provider import LLMProvider
from aistudio_workflows.workflows.registry import WorkflowRegistry


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep settings independent of the developer's shell and .env file."""
    import os

    for key in list(os.environ):
        if key.startswith("AISTUDIO_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def llm_config() -> LLMConfig:
    """Provide a test LLM configuration."""
    return LLMConfig(
        provider="openai",
        openai_api_key="test-key",
        openai_model="gpt-4o-mini",
    )


@pytest.fixture
def offline_config() -> AIStudioConfig:
    """Configuration with no external integrations."""
    return AIStudioConfig(
        llm=LLMConfig(provider="none"),
        research=ResearchWebhookConfig(),
        image_router=ImageRouterConfig(),
    )


@pytest.fixture
def fake_llm() -> Mock:
    """LLM provider double; tests set return values per call."""
    return Mock(spec=LLMProvider)


@pytest.fixture
def registry() -> WorkflowRegistry:
    return WorkflowRegistry()
