"""Request/response Pydantic models."""

from enum import Enum

from pydantic import BaseModel

from src.extraction.models import ArticleData


class SessionState(str, Enum):
    IDLE = "idle"
    DIRECT_ATTEMPT = "direct_attempt"
    AWAITING_FALLBACK_CHOICE = "awaiting_fallback_choice"
    CAPTURE_ATTEMPT = "capture_attempt"
    DONE = "done"
    FAILED = "failed"


class GrabRequest(BaseModel):
    url: str | None = None


class FallbackChoice(BaseModel):
    confirm: bool = True


class ErrorResponse(BaseModel):
    error: str


class SessionSnapshot(BaseModel):
    session_id: str = ""
    attempt: int = 0
    state: SessionState = SessionState.IDLE
    url: str | None = None
    article: ArticleData | None = None
    error: str | None = None
    fallback_offered: bool = False
