"""Configuration for the workflow subsystem.

Configuration is loaded from environment variables and a local `.env` file
(if present). Every external integration is optional: an absent key or URL
makes the corresponding workflow unavailable rather than failing startup.
"""

import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from aistudio_workflows.logging import configure_logging


class LLMConfig(BaseSettings):
    """Configuration for the LLM provider used by builtin workflows."""

    provider: Literal["openai", "none"] = Field(
        default="openai",
        description="LLM provider to use ('none' runs builtin workflows offline)",
    )

    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Override for OpenAI-compatible endpoints",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Chat model used for text workflows",
    )
    openai_image_model: str = Field(
        default="gpt-image-1",
        description="Image model used by the builtin image workflow",
    )
    openai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Default sampling temperature",
    )
    request_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Per-request timeout for provider calls",
    )

    model_config = SettingsConfigDict(
        env_prefix="AISTUDIO_LLM_",
        env_file=".env",
        extra="ignore",
    )


class ResearchWebhookConfig(BaseSettings):
    """Configuration for the webhook-backed research workflow."""

    webhook_url: str | None = Field(
        default=None,
        description="Research service URL; the webhook workflow is available only when set",
    )
    connect_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Connection timeout for webhook requests",
    )
    read_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Idle read timeout for webhook responses (None = wait indefinitely)",
    )

    model_config = SettingsConfigDict(
        env_prefix="AISTUDIO_RESEARCH_",
        env_file=".env",
        extra="ignore",
    )


class ImageRouterConfig(BaseSettings):
    """Configuration for the ImageRouter image workflow."""

    api_key: str | None = Field(
        default=None,
        description="ImageRouter API key; the workflow is available only when set",
    )
    base_url: str = Field(
        default="https://api.imagerouter.io/v1/openai",
        description="OpenAI-compatible ImageRouter base URL",
    )
    models_url: str = Field(
        default="https://api.imagerouter.io/v1/models?type=image",
        description="Model catalogue URL",
    )
    model: str = Field(
        default="openai/gpt-image-1",
        description="Default image model",
    )
    free_only: bool = Field(
        default=False,
        description="Only list free models",
    )
    models_cache_ttl_seconds: float = Field(
        default=300.0,
        ge=0,
        description="How long the model size catalogue is cached",
    )
    request_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for generation requests",
    )

    model_config = SettingsConfigDict(
        env_prefix="AISTUDIO_IMAGEROUTER_",
        env_file=".env",
        extra="ignore",
    )


class ServerConfig(BaseSettings):
    """Configuration for the HTTP adapter."""

    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(
        env_prefix="AISTUDIO_SERVER_",
        env_file=".env",
        extra="ignore",
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class AIStudioConfig(BaseSettings):
    """Main configuration for the workflow subsystem."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="LLM configuration",
    )
    research: ResearchWebhookConfig = Field(
        default_factory=ResearchWebhookConfig,
        description="Webhook research configuration",
    )
    image_router: ImageRouterConfig = Field(
        default_factory=ImageRouterConfig,
        description="ImageRouter configuration",
    )
    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="HTTP adapter configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="AISTUDIO_",
        env_file=".env",
        extra="ignore",
    )

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        configure_logging(self.log_level)

        if self.debug:
            logging.getLogger("aistudio_workflows").setLevel(logging.DEBUG)
