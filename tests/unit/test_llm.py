"""Unit tests for LLM providers."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from aistudio_workflows.core.config import LLMConfig
from aistudio_workflows.errors import InvalidResponseError, RateLimitError
from aistudio_workflows.llm.factory import LLMFactory
from aistudio_workflows.llm.openai_provider import OpenAIProvider


def _completion(text: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def _chunk(text: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class _FakeStream:
    def __init__(self, chunks: list[SimpleNamespace]) -> None:
        self._chunks = chunks
        self.closed = False

    def __iter__(self):
        return iter(self._chunks)

    def close(self) -> None:
        self.closed = True


def test_llm_factory_creates_openai(llm_config: LLMConfig) -> None:
    provider = LLMFactory.create(llm_config)

    assert isinstance(provider, OpenAIProvider)
    assert provider.model == "gpt-4o-mini"


def test_llm_factory_without_key_returns_none() -> None:
    assert LLMFactory.create(LLMConfig(provider="openai", openai_api_key=None)) is None


def test_llm_factory_disabled_provider() -> None:
    assert LLMFactory.create(LLMConfig(provider="none", openai_api_key="test-key")) is None


def test_openai_provider_requires_key_without_client() -> None:
    with pytest.raises(ValueError, match="API key"):
        OpenAIProvider(LLMConfig(openai_api_key=None))


def test_chat_uses_configured_model_and_temperature(llm_config: LLMConfig) -> None:
    client = MagicMock()
    client.chat.completions.create.return_value = _completion("hello")
    provider = OpenAIProvider(llm_config, client=client)

    result = provider.chat([{"role": "user", "content": "hi"}])

    assert result == "hello"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["temperature"] == 0.7


def test_chat_model_override_and_empty_content(llm_config: LLMConfig) -> None:
    client = MagicMock()
    client.chat.completions.create.return_value = _completion(None)
    provider = OpenAIProvider(llm_config, client=client)

    result = provider.generate("hi", temperature=0.1, model="gpt-4o")

    assert result == ""
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["temperature"] == 0.1


def test_stream_chat_yields_fragments_and_closes(llm_config: LLMConfig) -> None:
    stream = _FakeStream([_chunk("Hel"), _chunk(None), _chunk("lo")])
    client = MagicMock()
    client.chat.completions.create.return_value = stream
    provider = OpenAIProvider(llm_config, client=client)

    assert list(provider.stream_chat([{"role": "user", "content": "hi"}])) == ["Hel", "lo"]
    assert stream.closed is True
    assert client.chat.completions.create.call_args.kwargs["stream"] is True


def test_chat_translates_rate_limit(llm_config: LLMConfig) -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    client = MagicMock()
    client.chat.completions.create.side_effect = openai.RateLimitError(
        "slow down", response=httpx.Response(429, request=request), body=None
    )
    provider = OpenAIProvider(llm_config, client=client)

    with pytest.raises(RateLimitError):
        provider.chat([{"role": "user", "content": "hi"}])


def test_generate_image(llm_config: LLMConfig) -> None:
    client = MagicMock()
    client.images.generate.return_value = SimpleNamespace(data=[SimpleNamespace(b64_json="QUJD")])
    provider = OpenAIProvider(llm_config, client=client)

    image = provider.generate_image("a cat", size="1024x1024")

    assert image.base64_data == "QUJD"
    assert image.mime_type == "image/png"
    kwargs = client.images.generate.call_args.kwargs
    assert kwargs["model"] == "gpt-image-1"
    assert kwargs["size"] == "1024x1024"
    assert "quality" not in kwargs


def test_edit_image_sends_file_tuple(llm_config: LLMConfig) -> None:
    client = MagicMock()
    client.images.edit.return_value = SimpleNamespace(data=[SimpleNamespace(b64_json="QUJD")])
    provider = OpenAIProvider(llm_config, client=client)

    provider.edit_image(b"raw", "image/jpeg", "make it blue", quality="high")

    kwargs = client.images.edit.call_args.kwargs
    assert kwargs["image"] == ("image.png", b"raw", "image/jpeg")
    assert kwargs["quality"] == "high"


def test_image_without_data_is_invalid(llm_config: LLMConfig) -> None:
    client = MagicMock()
    client.images.generate.return_value = SimpleNamespace(data=[])
    provider = OpenAIProvider(llm_config, client=client)

    with pytest.raises(InvalidResponseError):
        provider.generate_image("a cat")


def test_count_tokens(llm_config: LLMConfig) -> None:
    provider = OpenAIProvider(llm_config, client=MagicMock())

    assert provider.count_tokens("a" * 40) == 10
