"""Turns raw model output into a validated ArticleData record."""

from __future__ import annotations

import logging
import re

import pydantic

from src.extraction.exceptions import MalformedResponseError
from src.extraction.models import ArticleData

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)

# Cap on how much of an unparseable response goes into the log line.
_LOG_PREVIEW_CHARS = 2000


def strip_code_fence(text: str) -> str:
    """Return the interior of the first fenced code block, or the stripped text."""
    text = text.strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1)
    return text


def normalize(raw_text: str | None) -> ArticleData:
    """Parse *raw_text* into an ArticleData, tolerating markdown code fences.

    Raises MalformedResponseError for empty output, invalid JSON, or JSON that
    does not match the article shape. Never returns a partial record.
    """
    if raw_text is None or not raw_text.strip():
        logger.error("model returned an empty response")
        raise MalformedResponseError("The AI returned an empty response.", raw_text=raw_text or "")

    payload = strip_code_fence(raw_text)
    try:
        return ArticleData.model_validate_json(payload)
    except pydantic.ValidationError as exc:
        invalid_json = any(err["type"] == "json_invalid" for err in exc.errors())
        logger.error(
            "failed to parse model response",
            extra={
                "raw_response": payload[:_LOG_PREVIEW_CHARS],
                "invalid_json": invalid_json,
                "error_count": exc.error_count(),
            },
        )
        if invalid_json:
            message = "The AI returned a response that was not valid JSON."
        else:
            message = "The AI returned JSON that does not match the article format."
        raise MalformedResponseError(message, raw_text=payload) from exc
