"""Plain data records exchanged with workflow callers and remote services.

All records serialise with the camelCase field names used on the wire
(``channelId``, ``toolInput`` ...) while exposing snake_case attributes.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, protected_namespaces=()
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContentType(str, Enum):
    ARTICLE = "article"
    POST = "post"
    NEWSLETTER = "newsletter"


# ============== Chat / query records ==============


class ChatMessage(WireModel):
    role: Literal["user", "assistant"]
    text: str


class ResearchModelConfig(WireModel):
    """Model selection forwarded to the remote research service."""

    strategy_model: str | None = None
    answer_model: str | None = None
    final_answer_model: str | None = None


class AgentQuery(WireModel):
    query: str
    channel_id: str | None = None
    history: list[ChatMessage] | None = None
    notebook_id: str | None = None
    max_steps: int | None = Field(default=None, gt=0)
    models: ResearchModelConfig | None = Field(default=None, alias="modelConfig")


class ResearchStreamOptions(AgentQuery):
    verbose: bool | None = None
    search_web: bool | None = None


# ============== Sources / responses ==============

LocationType = Literal[
    "line", "page", "paragraph", "chapter", "section", "timecode", "anchor", "index"
]


class SourceLocation(WireModel):
    type: LocationType
    value: str
    label: str | None = None


class SourceReference(WireModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, protected_namespaces=(), extra="allow"
    )

    id: str | None = None
    name: str | None = None
    content: str | None = None
    excerpt: str | None = None
    score: float | None = None
    used_in_response: bool | None = None
    location: SourceLocation | None = None
    source_type: str | None = None


class ToolCall(WireModel):
    name: str
    args: dict[str, Any] | None = None
    result: Any = None


class AgentResponse(WireModel):
    response: str
    sources: list[SourceReference] | None = None
    tool_calls: list[ToolCall] | None = None
    steps: int | None = None


# ============== Research stream events ==============


class _StreamEvent(WireModel):
    # Remote services may attach fields we do not model; keep them.
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, protected_namespaces=(), extra="allow"
    )


class StatusEvent(_StreamEvent):
    type: Literal["status"] = "status"
    status: str | None = None


class ToolStartEvent(_StreamEvent):
    type: Literal["tool_start"] = "tool_start"
    tool: str | None = None
    tool_input: Any = None
    status: str | None = None


class ToolResultEvent(_StreamEvent):
    type: Literal["tool_result"] = "tool_result"
    tool: str | None = None
    tool_input: Any = None
    tool_result: Any = None


class DeltaEvent(_StreamEvent):
    type: Literal["delta"] = "delta"
    content: str | None = None


class SourcesEvent(_StreamEvent):
    type: Literal["sources"] = "sources"
    sources: list[SourceReference] = Field(default_factory=list)


class DoneEvent(_StreamEvent):
    type: Literal["done"] = "done"
    response: str | None = None
    sources: list[SourceReference] | None = None
    steps: int | None = None


class ErrorEvent(_StreamEvent):
    type: Literal["error"] = "error"
    error: str = "Unknown error occurred"


ResearchStreamEvent = Annotated[
    StatusEvent
    | ToolStartEvent
    | ToolResultEvent
    | DeltaEvent
    | SourcesEvent
    | DoneEvent
    | ErrorEvent,
    Field(discriminator="type"),
]

research_event_adapter: TypeAdapter[ResearchStreamEvent] = TypeAdapter(ResearchStreamEvent)

TERMINAL_EVENT_TYPES = frozenset({"done", "error"})


# ============== Content records ==============


class ContentInput(WireModel):
    content_type: ContentType
    instruction: str
    current_content: str = ""
    history: list[ChatMessage] = Field(default_factory=list)


class RefineContentResult(WireModel):
    content: str
    chat_response: str


class ContentDelta(WireModel):
    type: Literal["delta"] = "delta"
    content: str


class ContentDone(WireModel):
    type: Literal["done"] = "done"
    content: str
    chat_response: str


ContentStreamChunk = Annotated[ContentDelta | ContentDone, Field(discriminator="type")]


# ============== Metadata records ==============


class MetadataOperation(str, Enum):
    TITLE = "title"
    SUBJECT = "subject"
    SEO_METADATA = "seoMetadata"
    EXCERPT = "excerpt"
    PREVIEW_TEXT = "previewText"
    POST_DETAILS = "postDetails"


class MetadataInput(WireModel):
    content: str
    content_type: ContentType
    title: str | None = None
    prompt: str | None = None
    current_caption: str | None = None


class TitleResult(WireModel):
    title: str


class SubjectResult(WireModel):
    subject: str


class SeoMetadata(WireModel):
    title: str
    description: str
    keywords: str
    slug: str


class MetadataResult(WireModel):
    seo: SeoMetadata
    excerpt: str


class ExcerptResult(WireModel):
    excerpt: str


class PreviewTextResult(WireModel):
    preview_text: str


class PostDetailsResult(WireModel):
    content: str
    alt_text: str
    tags: list[str]


class MetadataResults(WireModel):
    """Results keyed by operation; only requested operations are set."""

    title: TitleResult | None = None
    subject: SubjectResult | None = None
    seo_metadata: MetadataResult | None = None
    excerpt: ExcerptResult | None = None
    preview_text: PreviewTextResult | None = None
    post_details: PostDetailsResult | None = None


# ============== Image records ==============

ImageType = Literal["photo", "illustration", "icon", "diagram", "art", "other"]
ImageQuality = Literal["auto", "low", "medium", "high"]

DEFAULT_IMAGE_SYSTEM_PROMPT = "Do not write text into the image"

IMAGE_TYPE_DESCRIPTIONS: dict[str, str] = {
    "photo": "a realistic photograph",
    "illustration": "an illustration or drawing",
    "icon": "a clean, simple icon",
    "diagram": "a clear, informative diagram",
    "art": "an artistic or creative image",
    "other": "",
}


class ImageBounds(WireModel):
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    aspect_ratio: str | None = None


class ImageGenerateInput(WireModel):
    prompt: str
    image_type: ImageType | None = None
    bounds: ImageBounds | None = None
    model: str | None = None
    quality: ImageQuality | None = None
    system_prompt: str | None = None


class ImageEditInput(WireModel):
    base64_image_data: str
    mime_type: str
    prompt: str
    image_type: ImageType | None = None
    bounds: ImageBounds | None = None
    model: str | None = None
    quality: ImageQuality | None = None


class ImageGenerationResult(WireModel):
    image_url: str
    base64_image: str
    mime_type: str


class ImageEditResult(WireModel):
    image_url: str
    base64_image: str


class ImageModelInfo(WireModel):
    """Model entry from an image provider catalogue."""

    id: str
    name: str
    provider: str
    is_free: bool
    supports_edit: bool
    supports_quality: bool
    is_edit_only: bool
    sizes: list[str] | None = None
    price_per_image: float | None = None


# ============== Bulk / task records ==============


class BulkArticle(WireModel):
    title: str
    content: str


class BulkPost(WireModel):
    caption: str
    platform: str


class BulkContentResult(WireModel):
    articles: list[BulkArticle] = Field(default_factory=list)
    posts: list[BulkPost] = Field(default_factory=list)


class TaskType(str, Enum):
    CREATE_ARTICLE_DRAFT = "create_article_draft"
    CREATE_POST_DRAFT = "create_post_draft"
    CREATE_MEDIA_DRAFT = "create_media_draft"


# ============== Inline citation references ==============

REFERENCE_PATTERN = re.compile(r"\[\[ref:id=([^|]+)\|name=([^|\]]+)(?:\|loc=([^:]+):([^\]]+))?\]\]")


def build_reference(source_id: str, name: str, location: SourceLocation | None = None) -> str:
    """Build an inline reference: ``[[ref:id=..|name=..|loc=type:value]]``."""
    escaped_name = re.sub(r"[|\]]", " ", name)
    ref = f"[[ref:id={source_id}|name={escaped_name}"
    if location is not None:
        ref += f"|loc={location.type}:{location.value.replace(']', '')}"
    return ref + "]]"


def _reference_from_match(match: re.Match[str]) -> SourceReference:
    location = None
    if match.group(3) in get_args(LocationType) and match.group(4):
        location = SourceLocation.model_validate({"type": match.group(3), "value": match.group(4)})
    return SourceReference(id=match.group(1), name=match.group(2), location=location)


def parse_reference(ref: str) -> SourceReference | None:
    match = REFERENCE_PATTERN.search(ref)
    if match is None:
        return None
    return _reference_from_match(match)


def find_references(text: str) -> list[SourceReference]:
    """Return every inline reference in ``text`` in order of appearance."""
    return [_reference_from_match(m) for m in REFERENCE_PATTERN.finditer(text)]
