"""Local metadata heuristics.

Deterministic fallbacks used when no language model is configured or when a
model answer cannot be parsed.
"""

from __future__ import annotations

import html
import re
from collections import Counter

_TAG = re.compile(r"<[^>]+>")
_WS = re.compile(r"\s+")
_HEADING = re.compile(
    r"^\s*(?:#{1,6}\s+(.+)|<h[1-3][^>]*>(.*?)</h[1-3]>)", re.IGNORECASE | re.MULTILINE
)
_SENTENCE_END = re.compile(r"(?<=[.!?])\s")
_WORD = re.compile(r"[a-zA-Z][a-zA-Z'-]{2,}")

STOPWORDS = frozenset(
    """
    about above after again against all also and any are because been before being
    below between both but can could did does doing down during each few for from
    further had has have having her here hers herself him himself his how into its
    itself just more most not now off once only other our ours out over own same
    she should some such than that the their theirs them then there these they this
    those through too under until very was were what when where which while who whom
    why will with would you your yours
    """.split()
)


def plain_text(content: str) -> str:
    """Strip markup and collapse whitespace."""
    return _WS.sub(" ", html.unescape(_TAG.sub(" ", content))).strip()


def truncate_words(text: str, limit: int, ellipsis: str = "...") -> str:
    if len(text) <= limit:
        return text
    cut = text[: limit - len(ellipsis)]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" ,;:-") + ellipsis


def first_sentence(text: str) -> str:
    return _SENTENCE_END.split(text, maxsplit=1)[0].strip()


def guess_title(content: str, limit: int = 60) -> str:
    match = _HEADING.search(content)
    if match:
        candidate = plain_text(match.group(1) or match.group(2) or "")
    else:
        candidate = first_sentence(plain_text(content)).rstrip(".")
    return truncate_words(candidate, limit, ellipsis="")


def slugify(text: str, limit: int = 60) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:limit].rstrip("-")


def keywords(content: str, count: int = 8) -> list[str]:
    words = [w.lower().strip("'-") for w in _WORD.findall(plain_text(content))]
    counter = Counter(w for w in words if w not in STOPWORDS and len(w) > 3)
    order = {w: i for i, w in reversed(list(enumerate(words)))}
    ranked = sorted(counter, key=lambda w: (-counter[w], order[w]))
    return ranked[:count]


def hashtag(tag: str) -> str:
    tag = str(tag).strip()
    return tag if tag.startswith("#") else f"#{tag}"
