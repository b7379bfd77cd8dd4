"""Abstract base class for LLM providers."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class GeneratedImage:
    """Base64-encoded image returned by a provider."""

    base64_data: str
    mime_type: str = "image/png"


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Builtin workflows talk to models only through this interface, so a provider
    can be swapped (or faked in tests) without touching workflow code.
    """

    @abstractmethod
    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate text completion from a prompt.

        Args:
            prompt: The input prompt.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional provider-specific parameters.

        Returns:
            Generated text completion.
        """

    @abstractmethod
    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate chat completion from messages.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional provider-specific parameters.

        Returns:
            Generated chat response.
        """

    @abstractmethod
    def stream_chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> Iterator[str]:
        """Stream a chat completion as text fragments.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional provider-specific parameters.

        Yields:
            Text fragments in generation order.
        """

    @abstractmethod
    def generate_image(
        self,
        prompt: str,
        size: str | None = None,
        quality: str | None = None,
        model: str | None = None,
    ) -> GeneratedImage:
        """Generate an image from a text prompt."""

    @abstractmethod
    def edit_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        size: str | None = None,
        quality: str | None = None,
        model: str | None = None,
    ) -> GeneratedImage:
        """Edit an image according to a text prompt."""

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        """Count the number of tokens in text.

        Args:
            text: Text to count tokens for.

        Returns:
            Number of tokens.
        """
