"""Built-in metadata workflow.

Each requested operation asks the model for a small JSON object. When no model
is configured, or its answer cannot be parsed, local heuristics fill in.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

from pydantic import BaseModel

from aistudio_workflows.llm.provider import LLMProvider
from aistudio_workflows.workflows.metadata import heuristics
from aistudio_workflows.workflows.models import (
    ExcerptResult,
    MetadataInput,
    MetadataOperation,
    MetadataResult,
    MetadataResults,
    PostDetailsResult,
    PreviewTextResult,
    SeoMetadata,
    SubjectResult,
    TitleResult,
)
from aistudio_workflows.workflows.structured import parse_model_output
from aistudio_workflows.workflows.types import MetadataWorkflow

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

_JSON_ONLY = "Always respond with a single valid JSON object and nothing else."


class BuiltinMetadataWorkflow(MetadataWorkflow):
    """Generates titles, subjects, SEO fields, excerpts and post details."""

    id = "builtin"
    name = "Built-in Metadata"
    description = "Generates metadata with the configured language model or local heuristics"

    def __init__(self, llm: LLMProvider | None = None) -> None:
        self._llm = llm

    def is_available(self) -> bool:
        return True

    def generate(
        self, operations: Sequence[MetadataOperation | str], metadata_input: MetadataInput
    ) -> MetadataResults:
        ops = [MetadataOperation(op) for op in operations]
        logger.info(
            "Generating metadata",
            extra={
                "operations": [op.value for op in ops],
                "content_type": metadata_input.content_type.value,
            },
        )

        results = MetadataResults()
        for op in dict.fromkeys(ops):
            if op is MetadataOperation.TITLE:
                results.title = self.generate_title(metadata_input.content)
            elif op is MetadataOperation.SUBJECT:
                results.subject = self.generate_subject(metadata_input.content)
            elif op is MetadataOperation.SEO_METADATA:
                title = metadata_input.title or self.generate_title(metadata_input.content).title
                results.seo_metadata = self.generate_seo_metadata(metadata_input.content, title)
            elif op is MetadataOperation.EXCERPT:
                results.excerpt = self.generate_excerpt(metadata_input.content)
            elif op is MetadataOperation.PREVIEW_TEXT:
                results.preview_text = self.generate_preview_text(metadata_input.content)
            elif op is MetadataOperation.POST_DETAILS:
                results.post_details = self.generate_post_details(
                    metadata_input.prompt or "Generate details for this content",
                    metadata_input.current_caption or metadata_input.content,
                )
        return results

    def _ask(
        self,
        result_cls: type[R],
        system: str,
        prompt: str,
        fallback: Callable[[], R],
        temperature: float = 0.5,
    ) -> R:
        if self._llm is None:
            return fallback()

        text = self._llm.chat(
            [
                {"role": "system", "content": f"{system} {_JSON_ONLY}"},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        parsed = parse_model_output(text, result_cls)
        if parsed is None:
            logger.warning(
                "Falling back to heuristic metadata", extra={"schema": result_cls.__name__}
            )
            return fallback()
        return parsed

    def generate_title(self, content: str) -> TitleResult:
        return self._ask(
            TitleResult,
            'You are a headline writer. Generate a catchy, SEO-friendly title (max 60 characters) '
            'as {"title": "..."}.',
            f"Generate a title for this article content:\n\n{content[:2000]}",
            lambda: TitleResult(title=heuristics.guess_title(content)),
        )

    def generate_subject(self, content: str) -> SubjectResult:
        return self._ask(
            SubjectResult,
            'You are an email marketing expert. Generate a compelling subject line as '
            '{"subject": "..."}.',
            f"Generate a subject line for this newsletter:\n\n{content[:2000]}",
            lambda: SubjectResult(subject=heuristics.guess_title(content, limit=78)),
        )

    def generate_seo_metadata(self, content: str, title: str) -> MetadataResult:
        def fallback() -> MetadataResult:
            text = heuristics.plain_text(content)
            return MetadataResult(
                seo=SeoMetadata(
                    title=heuristics.truncate_words(title, 60, ellipsis=""),
                    description=heuristics.truncate_words(text, 160),
                    keywords=", ".join(heuristics.keywords(content)),
                    slug=heuristics.slugify(title),
                ),
                excerpt=heuristics.truncate_words(text, 150),
            )

        return self._ask(
            MetadataResult,
            "You are an SEO specialist. Respond as "
            '{"seo": {"title": "...", "description": "...", "keywords": "comma, separated", '
            '"slug": "..."}, "excerpt": "..."} with a title of at most 60 characters, a '
            "description of at most 160 characters and an excerpt of about 150 characters.",
            f"Generate SEO metadata and a short excerpt for this article.\n"
            f"Title: {title}\nContent: {content[:3000]}",
            fallback,
            temperature=0.6,
        )

    def generate_excerpt(self, content: str) -> ExcerptResult:
        return self._ask(
            ExcerptResult,
            'Summarize text into a short excerpt as {"excerpt": "..."}.',
            f"Summarize this text into a short excerpt:\n\n{content[:2000]}",
            lambda: ExcerptResult(
                excerpt=heuristics.truncate_words(heuristics.plain_text(content), 150)
            ),
            temperature=0.6,
        )

    def generate_preview_text(self, content: str) -> PreviewTextResult:
        return self._ask(
            PreviewTextResult,
            'Write email preheader text as {"previewText": "..."}.',
            f"Generate a short preview text (preheader) for this email:\n\n{content[:2000]}",
            lambda: PreviewTextResult(
                preview_text=heuristics.truncate_words(heuristics.plain_text(content), 90)
            ),
            temperature=0.6,
        )

    def generate_post_details(self, prompt: str, current_caption: str) -> PostDetailsResult:
        def fallback() -> PostDetailsResult:
            caption = heuristics.plain_text(current_caption) or prompt
            return PostDetailsResult(
                content=caption,
                alt_text=f"Image accompanying the post: {heuristics.guess_title(caption)}",
                tags=heuristics.keywords(caption, count=5),
            )

        result = self._ask(
            PostDetailsResult,
            "You create Instagram posts. Respond as "
            '{"content": "caption with emojis", "altText": "image description", '
            '"tags": ["hashtags", "without", "symbol"]}.',
            f'Create or refine an Instagram post based on the user\'s prompt.\n'
            f'User Prompt: "{prompt}"\nCurrent Caption Context: "{current_caption}"',
            fallback,
            temperature=0.8,
        )
        return PostDetailsResult(
            content=result.content,
            alt_text=result.alt_text,
            tags=[heuristics.hashtag(t) for t in result.tags if str(t).strip()],
        )
