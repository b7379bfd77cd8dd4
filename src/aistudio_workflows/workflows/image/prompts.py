"""Prompt and size helpers shared by image workflows."""

from __future__ import annotations

from aistudio_workflows.workflows.models import IMAGE_TYPE_DESCRIPTIONS, ImageBounds, ImageType

MAX_PROMPT_LENGTH = 512
DEFAULT_SIZE = "1024x1024"

ASPECT_RATIO_SIZES: dict[str, str] = {
    "1:1": "1024x1024",
    "16:9": "1792x1024",
    "9:16": "1024x1792",
    "4:3": "1408x1024",
    "3:4": "1024x1408",
    "3:2": "1536x1024",
    "2:3": "1024x1536",
}


def build_image_prompt(prompt: str, image_type: ImageType | None = None) -> str:
    description = IMAGE_TYPE_DESCRIPTIONS.get(image_type or "", "")
    if not description:
        return prompt
    return f"Generate {description}. Description: {prompt}"


def build_edit_prompt(prompt: str, image_type: ImageType | None = None) -> str:
    if not image_type or image_type == "other":
        return prompt
    target = "a realistic photograph" if image_type == "photo" else f"a {image_type}"
    return f"{prompt}. The result should be {target}."


def bounds_to_size(bounds: ImageBounds | None) -> str | None:
    """Map requested bounds to a ``WxH`` size string.

    Explicit dimensions win; otherwise a known aspect ratio is looked up.
    Returns None when nothing usable was requested.
    """
    if bounds is None:
        return None
    if bounds.width and bounds.height:
        return f"{bounds.width}x{bounds.height}"
    if bounds.aspect_ratio:
        return ASPECT_RATIO_SIZES.get(bounds.aspect_ratio.strip())
    return None


def _parse_size(size: str) -> tuple[int, int] | None:
    width, sep, height = size.partition("x")
    if not sep:
        return None
    try:
        w, h = int(width), int(height)
    except ValueError:
        return None
    if w <= 0 or h <= 0:
        return None
    return w, h


def find_best_size(requested: str, supported: list[str]) -> str:
    """Pick the supported size whose aspect ratio is closest to ``requested``."""
    if requested in supported:
        return requested

    parsed = _parse_size(requested)
    if parsed is None:
        return supported[0]
    target = parsed[0] / parsed[1]

    best = supported[0]
    best_diff = float("inf")
    for size in supported:
        dims = _parse_size(size)
        if dims is None:
            continue
        diff = abs(dims[0] / dims[1] - target)
        if diff < best_diff:
            best_diff = diff
            best = size
    return best
