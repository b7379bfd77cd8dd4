"""OpenAI LLM provider implementation."""

import logging
from collections.abc import Iterator
from typing import Any

from openai import OpenAI

from aistudio_workflows.core.config import LLMConfig
from aistudio_workflows.errors import InvalidResponseError, provider_errors
from aistudio_workflows.llm.provider import GeneratedImage, LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI API provider implementation."""

    def __init__(self, config: LLMConfig, client: OpenAI | None = None) -> None:
        """Initialize the OpenAI provider.

        Args:
            config: LLM configuration.
            client: Pre-built client (tests inject a mock here).

        Raises:
            ValueError: If API key is not provided.
        """
        if client is None and not config.openai_api_key:
            raise ValueError("OpenAI API key is required")

        self.config = config
        self.client = client or OpenAI(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            timeout=config.request_timeout_seconds,
        )
        self.model = config.openai_model
        self.image_model = config.openai_image_model
        self.temperature = config.openai_temperature

        logger.info(f"OpenAI provider initialized with model: {self.model}")

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate text completion using OpenAI API."""
        logger.debug(f"Generating completion for prompt: {prompt[:100]}...")
        return self.chat(
            [{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs,
        )

    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate chat completion using OpenAI API.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional OpenAI-specific parameters.

        Returns:
            Generated chat response.
        """
        temp = temperature if temperature is not None else self.temperature

        logger.debug(f"Generating chat completion with {len(messages)} messages")

        with provider_errors("OpenAIProvider.chat"):
            response = self.client.chat.completions.create(
                model=kwargs.pop("model", None) or self.model,
                messages=messages,  # type: ignore
                max_tokens=max_tokens,
                temperature=temp,
                **kwargs,
            )

        content = response.choices[0].message.content or ""
        logger.debug(f"Generated {len(content)} characters")

        return content

    def stream_chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> Iterator[str]:
        """Stream a chat completion using OpenAI API."""
        temp = temperature if temperature is not None else self.temperature

        with provider_errors("OpenAIProvider.stream_chat"):
            stream = self.client.chat.completions.create(
                model=kwargs.pop("model", None) or self.model,
                messages=messages,  # type: ignore
                max_tokens=max_tokens,
                temperature=temp,
                stream=True,
                **kwargs,
            )
            try:
                for chunk in stream:
                    if chunk.choices and chunk.choices[0].delta.content:
                        yield chunk.choices[0].delta.content
            finally:
                stream.close()

    def generate_image(
        self,
        prompt: str,
        size: str | None = None,
        quality: str | None = None,
        model: str | None = None,
    ) -> GeneratedImage:
        """Generate an image using the OpenAI images API."""
        params: dict[str, Any] = {"model": model or self.image_model, "prompt": prompt, "n": 1}
        if size:
            params["size"] = size
        if quality:
            params["quality"] = quality

        with provider_errors("OpenAIProvider.generate_image"):
            response = self.client.images.generate(**params)
        return self._first_image(response, "generate_image")

    def edit_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        size: str | None = None,
        quality: str | None = None,
        model: str | None = None,
    ) -> GeneratedImage:
        """Edit an image using the OpenAI images API."""
        params: dict[str, Any] = {
            "model": model or self.image_model,
            "image": ("image.png", image, mime_type),
            "prompt": prompt,
        }
        if size:
            params["size"] = size
        if quality:
            params["quality"] = quality

        with provider_errors("OpenAIProvider.edit_image"):
            response = self.client.images.edit(**params)
        return self._first_image(response, "edit_image")

    @staticmethod
    def _first_image(response: Any, operation: str) -> GeneratedImage:
        data = getattr(response, "data", None) or []
        b64 = getattr(data[0], "b64_json", None) if data else None
        if not b64:
            raise InvalidResponseError(f"No image data returned from {operation}")
        return GeneratedImage(base64_data=b64)

    def count_tokens(self, text: str) -> int:
        """Count tokens using a simple approximation.

        Args:
            text: Text to count tokens for.

        Returns:
            Estimated number of tokens.

        Note:
            This is a rough approximation. For accurate counts,
            use tiktoken library with the specific model's encoding.
        """
        # Rough approximation: 1 token ≈ 4 characters
        return len(text) // 4
