"""ImageRouter image workflow.

Talks to the OpenAI-compatible ImageRouter HTTP API with ``requests``. The
model catalogue is fetched lazily and cached per workflow instance to map
requested sizes onto sizes each model actually supports.
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
import time
from typing import Any

import requests

from aistudio_workflows.core.config import ImageRouterConfig
from aistudio_workflows.errors import (
    AIServiceError,
    InvalidResponseError,
    WorkflowUnavailableError,
    provider_errors,
)
from aistudio_workflows.workflows.image.prompts import (
    DEFAULT_SIZE,
    MAX_PROMPT_LENGTH,
    bounds_to_size,
    build_edit_prompt,
    build_image_prompt,
    find_best_size,
)
from aistudio_workflows.workflows.models import (
    DEFAULT_IMAGE_SYSTEM_PROMPT,
    ImageBounds,
    ImageEditInput,
    ImageEditResult,
    ImageGenerateInput,
    ImageGenerationResult,
    ImageModelInfo,
)
from aistudio_workflows.workflows.types import ImageWorkflow

logger = logging.getLogger(__name__)

FREE_SUFFIX = ":free"

EDIT_ONLY_PATTERNS = (
    "blur-background",
    "remove-background",
    "erase-foreground",
    "enhance",
    "upscale",
    "colorize",
    "deblur",
)


def is_free_model(model_id: str) -> bool:
    return model_id.endswith(FREE_SUFFIX)


def _display_name(model_id: str) -> str:
    base, sep, suffix = model_id.rpartition(":")
    if sep and "/" not in suffix:
        model_id = base
    return model_id.split("/")[-1] or model_id


def _price(info: dict[str, Any]) -> float | None:
    providers = info.get("providers") or []
    if not providers:
        return None
    pricing = providers[0].get("pricing") or {}
    if pricing.get("value") is not None:
        return float(pricing["value"])
    price_range = pricing.get("range") or {}
    if price_range.get("average") is not None:
        return float(price_range["average"])
    return None


def parse_model_catalogue(data: dict[str, Any], free_only: bool = False) -> list[ImageModelInfo]:
    """Turn the raw catalogue into sorted model entries.

    Generation models come before edit-only models, free models first within
    each group, then alphabetical by name.
    """
    models: list[ImageModelInfo] = []
    for model_id, info in data.items():
        if "image" not in (info.get("output") or []):
            continue
        free = is_free_model(model_id)
        if free_only and not free:
            continue

        short = model_id.split("/")[-1].split(":")[0].lower()
        params = info.get("supported_params") or {}
        models.append(
            ImageModelInfo(
                id=model_id,
                name=_display_name(model_id),
                provider=model_id.split("/")[0] or "unknown",
                is_free=free,
                supports_edit=bool(params.get("edit", False)),
                supports_quality=bool(params.get("quality", False)),
                is_edit_only=any(p in short for p in EDIT_ONLY_PATTERNS),
                sizes=info.get("sizes"),
                price_per_image=_price(info),
            )
        )

    models.sort(key=lambda m: (m.is_edit_only, not m.is_free, m.name))
    return models


class ImageRouterWorkflow(ImageWorkflow):
    """Image generation and editing via the ImageRouter API."""

    id = "imagerouter"
    name = "ImageRouter"
    description = "Image generation and editing via ImageRouter.io API"

    def __init__(
        self,
        config: ImageRouterConfig | None = None,
        *,
        session: requests.Session | None = None,
        clock: Any = time.monotonic,
    ) -> None:
        self._config = config or ImageRouterConfig()
        self._session = session or requests.Session()
        self._clock = clock
        self._sizes_cache: dict[str, list[str]] | None = None
        self._sizes_cached_at = 0.0
        self._cache_lock = threading.Lock()

    def is_available(self) -> bool:
        return bool(self._config.api_key)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.api_key}"}

    def _require_key(self) -> None:
        if not self.is_available():
            raise WorkflowUnavailableError("ImageRouter API key is not configured")

    def _fetch_catalogue(self) -> dict[str, Any]:
        with provider_errors("ImageRouter model listing"):
            resp = self._session.get(
                self._config.models_url,
                headers=self._headers(),
                timeout=self._config.request_timeout_seconds,
            )
        if not resp.ok:
            logger.error(
                "Failed to fetch ImageRouter models",
                extra={"status": resp.status_code, "body": resp.text[:500]},
            )
            raise AIServiceError(
                f"Failed to fetch models: {resp.status_code}",
                "PROVIDER_ERROR",
                retryable=resp.status_code >= 500,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise InvalidResponseError("ImageRouter model catalogue is not valid JSON") from e
        if not isinstance(data, dict):
            raise InvalidResponseError("ImageRouter model catalogue has unexpected shape")
        return data

    def list_models(self) -> list[ImageModelInfo]:
        """List image models offered by ImageRouter."""
        self._require_key()
        logger.info("Fetching ImageRouter models", extra={"free_only": self._config.free_only})
        data = self._fetch_catalogue()
        self._store_sizes(data)
        models = parse_model_catalogue(data, free_only=self._config.free_only)
        logger.info("Found ImageRouter models", extra={"count": len(models)})
        return models

    def _store_sizes(self, data: dict[str, Any]) -> None:
        sizes = {
            model_id: list(info["sizes"])
            for model_id, info in data.items()
            if isinstance(info, dict) and info.get("sizes")
        }
        with self._cache_lock:
            self._sizes_cache = sizes
            self._sizes_cached_at = self._clock()

    def model_sizes(self, model_id: str) -> list[str] | None:
        """Supported sizes for ``model_id``, or None when unknown.

        Catalogue failures are logged and treated as unknown.
        """
        with self._cache_lock:
            fresh = (
                self._sizes_cache is not None
                and self._clock() - self._sizes_cached_at < self._config.models_cache_ttl_seconds
            )
            if fresh:
                return self._sizes_cache.get(model_id)  # type: ignore[union-attr]

        try:
            data = self._fetch_catalogue()
        except AIServiceError as e:
            logger.warning("Could not load ImageRouter model sizes", extra={"error": str(e)})
            return None
        self._store_sizes(data)
        return self._sizes_cache.get(model_id) if self._sizes_cache else None

    def _resolve_size(self, model: str, bounds: ImageBounds | None) -> str | None:
        size = bounds_to_size(bounds)
        if size is None:
            return None
        if is_free_model(model):
            if size != DEFAULT_SIZE:
                logger.info(
                    "Forcing free model size",
                    extra={"model": model, "requested": size, "size": DEFAULT_SIZE},
                )
            return DEFAULT_SIZE

        supported = self.model_sizes(model)
        if not supported:
            return size
        mapped = find_best_size(size, supported)
        if mapped != size:
            logger.info(
                "Mapped image size", extra={"model": model, "requested": size, "size": mapped}
            )
        return mapped

    @staticmethod
    def _first_b64(resp: requests.Response, operation: str) -> str:
        try:
            payload = resp.json()
        except ValueError as e:
            raise InvalidResponseError(f"ImageRouter {operation} response is not JSON") from e
        data = payload.get("data") if isinstance(payload, dict) else None
        b64 = data[0].get("b64_json") if data and isinstance(data[0], dict) else None
        if not b64:
            logger.error("No image data in ImageRouter response", extra={"operation": operation})
            raise InvalidResponseError(f"No image data in ImageRouter {operation} response")
        return b64

    @staticmethod
    def _raise_for_status(resp: requests.Response, operation: str) -> None:
        if resp.ok:
            return
        logger.error(
            "ImageRouter request failed",
            extra={"operation": operation, "status": resp.status_code, "body": resp.text[:500]},
        )
        raise AIServiceError(
            f"ImageRouter API error: {resp.status_code} {resp.text}",
            "PROVIDER_ERROR",
            retryable=resp.status_code >= 500,
        )

    def generate(self, image_input: ImageGenerateInput) -> ImageGenerationResult:
        self._require_key()
        model = image_input.model or self._config.model
        system_prompt = (
            DEFAULT_IMAGE_SYSTEM_PROMPT
            if image_input.system_prompt is None
            else image_input.system_prompt
        )
        logger.info(
            "Generating image",
            extra={
                "model": model,
                "image_type": image_input.image_type,
                "quality": image_input.quality or "auto",
            },
        )

        prompt = build_image_prompt(image_input.prompt, image_input.image_type)
        if system_prompt:
            prompt = f"{system_prompt}. {prompt}"
        if len(prompt) > MAX_PROMPT_LENGTH:
            logger.warning(
                "Truncating image prompt", extra={"length": len(prompt), "limit": MAX_PROMPT_LENGTH}
            )
            prompt = prompt[:MAX_PROMPT_LENGTH]

        body: dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "response_format": "b64_json",
            "quality": image_input.quality or "auto",
        }
        size = self._resolve_size(model, image_input.bounds)
        if size:
            body["size"] = size

        with provider_errors("ImageRouter generate"):
            resp = self._session.post(
                f"{self._config.base_url}/images/generations",
                json=body,
                headers=self._headers(),
                timeout=self._config.request_timeout_seconds,
            )
        self._raise_for_status(resp, "generate")
        b64 = self._first_b64(resp, "generate")
        return ImageGenerationResult(
            image_url=f"data:image/png;base64,{b64}", base64_image=b64, mime_type="image/png"
        )

    def edit(self, image_input: ImageEditInput) -> ImageEditResult:
        self._require_key()
        model = image_input.model or self._config.model
        logger.info(
            "Editing image",
            extra={"model": model, "image_type": image_input.image_type},
        )
        try:
            raw = base64.b64decode(image_input.base64_image_data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AIServiceError("Image data is not valid base64", "BAD_REQUEST") from e

        form: dict[str, str] = {
            "model": model,
            "prompt": build_edit_prompt(image_input.prompt, image_input.image_type),
            "response_format": "b64_json",
        }
        if image_input.quality:
            form["quality"] = image_input.quality
        size = self._resolve_size(model, image_input.bounds)
        if size:
            form["size"] = size

        with provider_errors("ImageRouter edit"):
            resp = self._session.post(
                f"{self._config.base_url}/images/edits",
                data=form,
                files={"image": ("image.png", raw, image_input.mime_type)},
                headers=self._headers(),
                timeout=self._config.request_timeout_seconds,
            )
        self._raise_for_status(resp, "edit")
        b64 = self._first_b64(resp, "edit")
        return ImageEditResult(image_url=f"data:image/png;base64,{b64}", base64_image=b64)
