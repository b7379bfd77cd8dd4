"""Error taxonomy for AI workflows.

Provider and transport failures are translated into :class:`AIServiceError`
subclasses so callers can branch on ``code`` / ``retryable`` without importing
SDK-specific exception types. Nothing here retries: ``retryable`` only tells the
caller whether trying again might succeed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import openai
import requests

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Base error for all workflow failures."""

    def __init__(self, message: str, code: str = "UNKNOWN", retryable: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable


class RateLimitError(AIServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "RATE_LIMIT", retryable=True)


class ModelUnavailableError(AIServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "MODEL_UNAVAILABLE", retryable=True)


class ContentFilterError(AIServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "CONTENT_FILTER")


class InvalidResponseError(AIServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "INVALID_RESPONSE")


class WorkflowUnavailableError(AIServiceError):
    """A workflow was invoked without the configuration it needs."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "WORKFLOW_UNAVAILABLE")


class WebhookError(AIServiceError):
    """A remote workflow service answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            f"Webhook request failed with status {status_code}: {body}",
            "WEBHOOK_FAILED",
            retryable=status_code >= 500,
        )
        self.status_code = status_code
        self.body = body


def _is_content_filter(message: str) -> bool:
    lowered = message.lower()
    return "content_filter" in lowered or "content-filter" in lowered or "safety" in lowered


@contextmanager
def provider_errors(context: str) -> Iterator[None]:
    """Translate SDK and transport exceptions raised inside the block.

    Args:
        context: Name of the operation, used in error messages.

    Raises:
        AIServiceError: Or one of its subclasses, chained to the original error.
    """
    try:
        yield
    except AIServiceError:
        raise
    except openai.RateLimitError as e:
        raise RateLimitError(f"Rate limited during {context}: {e}") from e
    except openai.NotFoundError as e:
        raise ModelUnavailableError(f"Model unavailable during {context}: {e}") from e
    except openai.BadRequestError as e:
        if _is_content_filter(str(e)):
            raise ContentFilterError(f"Content was filtered during {context}") from e
        raise AIServiceError(f"Invalid request during {context}: {e}", "BAD_REQUEST") from e
    except (openai.APIConnectionError, openai.InternalServerError) as e:
        raise AIServiceError(
            f"Provider unreachable during {context}: {e}", "PROVIDER_UNAVAILABLE", retryable=True
        ) from e
    except openai.OpenAIError as e:
        raise AIServiceError(f"Operation failed during {context}: {e}") from e
    except requests.RequestException as e:
        raise AIServiceError(
            f"Transport failure during {context}: {e}", "TRANSPORT", retryable=True
        ) from e
