"""Factory for creating LLM providers."""

import logging

from aistudio_workflows.core.config import LLMConfig
from aistudio_workflows.llm.openai_provider import OpenAIProvider
from aistudio_workflows.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class LLMFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create(config: LLMConfig) -> LLMProvider | None:
        """Create an LLM provider based on configuration.

        Args:
            config: LLM configuration specifying the provider.

        Returns:
            Configured provider, or None when no provider is configured. Builtin
            workflows run in offline mode without one.

        Raises:
            ValueError: If provider type is not supported.
        """
        if config.provider == "none":
            logger.info("LLM provider disabled; builtin workflows run offline")
            return None

        if config.provider == "openai":
            if not config.openai_api_key:
                logger.warning("OpenAI API key not configured; builtin workflows run offline")
                return None
            logger.info(f"Creating LLM provider: {config.provider}")
            return OpenAIProvider(config)

        raise ValueError(f"Unsupported LLM provider: {config.provider}")
