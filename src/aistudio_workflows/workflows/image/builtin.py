"""Built-in image workflow using the configured LLM provider's image API."""

from __future__ import annotations

import base64
import binascii
import logging

from aistudio_workflows.errors import AIServiceError, WorkflowUnavailableError
from aistudio_workflows.llm.provider import LLMProvider
from aistudio_workflows.workflows.image.prompts import (
    DEFAULT_SIZE,
    bounds_to_size,
    build_edit_prompt,
    build_image_prompt,
)
from aistudio_workflows.workflows.models import (
    DEFAULT_IMAGE_SYSTEM_PROMPT,
    ImageEditInput,
    ImageEditResult,
    ImageGenerateInput,
    ImageGenerationResult,
)
from aistudio_workflows.workflows.types import ImageWorkflow

logger = logging.getLogger(__name__)


class BuiltinImageWorkflow(ImageWorkflow):
    """Generates and edits images directly through the LLM provider."""

    id = "builtin"
    name = "Built-in Image"
    description = "Generates images with the configured language model provider"

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self._llm = llm

    def is_available(self) -> bool:
        return True

    def _require_llm(self) -> LLMProvider:
        if self._llm is None:
            raise WorkflowUnavailableError("No LLM provider is configured for image generation")
        return self._llm

    def generate(self, image_input: ImageGenerateInput) -> ImageGenerationResult:
        llm = self._require_llm()
        system_prompt = (
            DEFAULT_IMAGE_SYSTEM_PROMPT
            if image_input.system_prompt is None
            else image_input.system_prompt
        )
        prompt = build_image_prompt(image_input.prompt, image_input.image_type)
        if system_prompt:
            prompt = f"{system_prompt}. {prompt}"

        logger.info(
            "Generating image",
            extra={"image_type": image_input.image_type, "prompt": image_input.prompt[:50]},
        )
        image = llm.generate_image(
            prompt,
            size=bounds_to_size(image_input.bounds) or DEFAULT_SIZE,
            quality=image_input.quality,
            model=image_input.model,
        )
        return ImageGenerationResult(
            image_url=f"data:{image.mime_type};base64,{image.base64_data}",
            base64_image=image.base64_data,
            mime_type=image.mime_type,
        )

    def edit(self, image_input: ImageEditInput) -> ImageEditResult:
        llm = self._require_llm()
        try:
            raw = base64.b64decode(image_input.base64_image_data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AIServiceError("Image data is not valid base64", "BAD_REQUEST") from e

        logger.info("Editing image", extra={"image_type": image_input.image_type})
        image = llm.edit_image(
            raw,
            image_input.mime_type,
            build_edit_prompt(image_input.prompt, image_input.image_type),
            size=bounds_to_size(image_input.bounds),
            quality=image_input.quality,
            model=image_input.model,
        )
        return ImageEditResult(
            image_url=f"data:{image.mime_type};base64,{image.base64_data}",
            base64_image=image.base64_data,
        )
