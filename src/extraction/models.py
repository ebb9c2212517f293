"""Data models for article extraction."""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

FAILED_TITLE = "Extraction Failed"

_WHITESPACE_RE = re.compile(r"\s+")


class ArticleData(BaseModel):
    """A normalized article record.

    A record titled ``"Extraction Failed"`` is the in-band failure value: its
    ``text_content`` carries the diagnostic and ``image_url`` is always None.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    title: str
    text_content: str = Field(alias="textContent")
    image_url: str | None = Field(default=None, alias="imageUrl")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("text_content")
    @classmethod
    def _collapse_whitespace(cls, v: str) -> str:
        return _WHITESPACE_RE.sub(" ", v).strip()

    @field_validator("image_url")
    @classmethod
    def _absolute_image_url(cls, v: str | None, info: ValidationInfo) -> str | None:
        if info.data.get("title") == FAILED_TITLE:
            return None
        if v is None:
            return None
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return None
        return v

    @property
    def is_failure(self) -> bool:
        return self.title == FAILED_TITLE

    @classmethod
    def failed(cls, message: str) -> ArticleData:
        return cls(title=FAILED_TITLE, text_content=message, image_url=None)


@dataclass(frozen=True)
class ImageFrame:
    """One JPEG screenshot of a viewport-sized region of a page."""

    data: bytes
    mime_type: str = "image/jpeg"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")
