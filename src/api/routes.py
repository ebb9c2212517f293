"""POST /grab, POST /extract and /sessions endpoint handlers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from src.api.schemas import ErrorResponse, FallbackChoice, GrabRequest, SessionSnapshot
from src.api.service import GRAB_FAILURE_MESSAGE, extract_article, grab_article, stream_grab
from src.extraction.capture import PageCapture
from src.extraction.direct import UrlExtractor
from src.extraction.exceptions import (
    ExtractionError,
    FallbackUnavailableError,
    URLValidationError,
)
from src.extraction.models import ArticleData
from src.extraction.orchestrator import ArticleGrabber
from src.extraction.sessions import SessionRegistry
from src.extraction.validation import validate_url
from src.extraction.vision import ImageExtractor

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _get_capture(request: Request) -> PageCapture:
    return request.app.state.capture


def _get_url_extractor(request: Request) -> UrlExtractor:
    return request.app.state.url_extractor


def _get_image_extractor(request: Request) -> ImageExtractor:
    return request.app.state.image_extractor


def _get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _checked_url(body: GrabRequest | None) -> str | JSONResponse:
    if body is None or not body.url:
        return _error(400, "URL is required")
    try:
        return validate_url(body.url)
    except URLValidationError as exc:
        return _error(400, str(exc))


@router.post("/grab", response_model=ArticleData, responses=_ERROR_RESPONSES)
async def grab(
    body: GrabRequest | None = None,
    capture: PageCapture = Depends(_get_capture),
    image_extractor: ImageExtractor = Depends(_get_image_extractor),
):
    url = _checked_url(body)
    if isinstance(url, JSONResponse):
        return url

    try:
        return await grab_article(capture, image_extractor, url)
    except Exception:
        logger.exception("error during capture or AI processing", extra={"url": url})
        return _error(500, GRAB_FAILURE_MESSAGE)


@router.post("/grab/stream", responses=_ERROR_RESPONSES)
async def grab_stream(
    body: GrabRequest | None = None,
    capture: PageCapture = Depends(_get_capture),
    image_extractor: ImageExtractor = Depends(_get_image_extractor),
):
    url = _checked_url(body)
    if isinstance(url, JSONResponse):
        return url
    return EventSourceResponse(stream_grab(capture, image_extractor, url))


@router.post("/extract", response_model=ArticleData, responses=_ERROR_RESPONSES)
async def extract(
    body: GrabRequest | None = None,
    url_extractor: UrlExtractor = Depends(_get_url_extractor),
):
    url = _checked_url(body)
    if isinstance(url, JSONResponse):
        return url

    try:
        return await extract_article(url_extractor, url)
    except ExtractionError as exc:
        logger.warning("direct extraction failed", extra={"url": url, "error": str(exc)})
        return _error(500, str(exc))


@router.post("/sessions", response_model=SessionSnapshot, status_code=201)
async def create_session(sessions: SessionRegistry = Depends(_get_sessions)):
    return sessions.create().snapshot()


def _lookup(sessions: SessionRegistry, session_id: str) -> ArticleGrabber | JSONResponse:
    grabber = sessions.get(session_id)
    if grabber is None:
        return _error(404, "Session not found")
    return grabber


@router.get("/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: str, sessions: SessionRegistry = Depends(_get_sessions)):
    grabber = _lookup(sessions, session_id)
    if isinstance(grabber, JSONResponse):
        return grabber
    return grabber.snapshot()


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, sessions: SessionRegistry = Depends(_get_sessions)):
    if not sessions.delete(session_id):
        return _error(404, "Session not found")
    return Response(status_code=204)


@router.post("/sessions/{session_id}/attempts", response_model=SessionSnapshot)
async def start_attempt(
    session_id: str,
    body: GrabRequest | None = None,
    sessions: SessionRegistry = Depends(_get_sessions),
):
    grabber = _lookup(sessions, session_id)
    if isinstance(grabber, JSONResponse):
        return grabber
    return await grabber.start(body.url if body else None)


@router.post("/sessions/{session_id}/fallback", response_model=SessionSnapshot)
async def choose_fallback(
    session_id: str,
    body: FallbackChoice,
    sessions: SessionRegistry = Depends(_get_sessions),
):
    grabber = _lookup(sessions, session_id)
    if isinstance(grabber, JSONResponse):
        return grabber

    try:
        if body.confirm:
            return await grabber.confirm_fallback()
        return await grabber.decline_fallback()
    except FallbackUnavailableError as exc:
        return _error(409, str(exc))
