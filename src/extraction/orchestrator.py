"""Extraction orchestrator: direct extraction with a screenshot fallback."""

from __future__ import annotations

import logging

from src.api.schemas import SessionSnapshot, SessionState
from src.extraction.capture import PageCapture
from src.extraction.direct import UrlExtractor, is_direct_access_failure
from src.extraction.events import STATE_EVENT, EventCallback, emit_event
from src.extraction.exceptions import (
    CaptureError,
    ExtractionError,
    FallbackUnavailableError,
    URLValidationError,
)
from src.extraction.models import ArticleData
from src.extraction.validation import validate_url
from src.extraction.vision import ImageExtractor

logger = logging.getLogger(__name__)

SCREENSHOT_FAILURE_MESSAGE = "AI failed to extract content from the screenshot."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

# Capture errors carrying these phrases mean the user declined or cancelled
# the capture; the session quietly returns to idle.
_CANCELLATION_PHRASES = ("permission denied", "not found")


def is_capture_cancellation(exc: CaptureError) -> bool:
    message = str(exc).lower()
    return any(phrase in message for phrase in _CANCELLATION_PHRASES)


class ArticleGrabber:
    """Runs one user's extraction attempts.

    ``start`` tries direct URL extraction. When the model reports that it
    could not reach the page, the session waits in
    ``awaiting_fallback_choice`` until ``confirm_fallback`` runs the
    capture-and-read path or ``decline_fallback`` drops it.

    Every ``start`` bumps the attempt token; results of an older attempt that
    arrive later are discarded.
    """

    def __init__(
        self,
        url_extractor: UrlExtractor,
        capture: PageCapture,
        image_extractor: ImageExtractor,
        session_id: str = "",
        on_event: EventCallback | None = None,
    ) -> None:
        self._url_extractor = url_extractor
        self._capture = capture
        self._image_extractor = image_extractor
        self.session_id = session_id
        self.on_event = on_event

        self._attempt = 0
        self._state = SessionState.IDLE
        self._url: str | None = None
        self._article: ArticleData | None = None
        self._error: str | None = None
        self._fallback_offered = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def attempt(self) -> int:
        return self._attempt

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            attempt=self._attempt,
            state=self._state,
            url=self._url,
            article=self._article,
            error=self._error,
            fallback_offered=self._fallback_offered,
        )

    async def start(self, url: str | None) -> SessionSnapshot:
        """Begin a new attempt, discarding everything about earlier ones."""
        self._attempt += 1
        token = self._attempt
        self._url = url
        self._article = None
        self._error = None
        self._fallback_offered = False

        try:
            url = validate_url(url)
        except URLValidationError as exc:
            logger.info("url rejected", extra={"session_id": self.session_id, "error": str(exc)})
            return await self._fail(str(exc))

        self._url = url
        await self._transition(SessionState.DIRECT_ATTEMPT)
        logger.info(
            "attempt started",
            extra={"session_id": self.session_id, "attempt": token, "url": url},
        )

        try:
            article = await self._url_extractor.extract_from_url(url)
        except ExtractionError as exc:
            if self._is_stale(token):
                return self.snapshot()
            logger.warning(
                "direct extraction failed",
                extra={"session_id": self.session_id, "attempt": token, "error": str(exc)},
            )
            return await self._fail(str(exc))
        except Exception:
            if self._is_stale(token):
                return self.snapshot()
            logger.exception(
                "direct extraction crashed",
                extra={"session_id": self.session_id, "attempt": token},
            )
            return await self._fail(UNKNOWN_ERROR_MESSAGE)

        if self._is_stale(token):
            return self.snapshot()

        if is_direct_access_failure(article):
            self._error = article.text_content
            self._fallback_offered = True
            return await self._transition(SessionState.AWAITING_FALLBACK_CHOICE)
        if article.is_failure:
            return await self._fail(article.text_content)

        self._article = article
        return await self._transition(SessionState.DONE)

    async def confirm_fallback(self) -> SessionSnapshot:
        """Capture the page and read the article from the screenshots."""
        self._require_fallback_offer()
        token = self._attempt
        url = self._url or ""
        self._fallback_offered = False
        self._error = None
        await self._transition(SessionState.CAPTURE_ATTEMPT)
        logger.info(
            "capture fallback started",
            extra={"session_id": self.session_id, "attempt": token, "url": url},
        )

        try:
            frames = await self._capture.capture_full_page(url, on_event=self.on_event)
            article = await self._image_extractor.extract_from_images(frames)
        except CaptureError as exc:
            if self._is_stale(token):
                return self.snapshot()
            if is_capture_cancellation(exc):
                logger.info(
                    "capture cancelled by user",
                    extra={"session_id": self.session_id, "attempt": token, "reason": str(exc)},
                )
                return await self._transition(SessionState.IDLE)
            logger.warning(
                "capture failed",
                extra={"session_id": self.session_id, "attempt": token, "error": str(exc)},
            )
            return await self._fail(str(exc))
        except ExtractionError as exc:
            if self._is_stale(token):
                return self.snapshot()
            logger.warning(
                "screenshot extraction failed",
                extra={"session_id": self.session_id, "attempt": token, "error": str(exc)},
            )
            return await self._fail(str(exc))
        except Exception:
            if self._is_stale(token):
                return self.snapshot()
            logger.exception(
                "capture fallback crashed",
                extra={"session_id": self.session_id, "attempt": token},
            )
            return await self._fail(UNKNOWN_ERROR_MESSAGE)

        if self._is_stale(token):
            return self.snapshot()

        if article.is_failure or not article.text_content:
            logger.info(
                "no usable content in screenshots",
                extra={"session_id": self.session_id, "attempt": token},
            )
            return await self._fail(SCREENSHOT_FAILURE_MESSAGE)

        self._article = article
        return await self._transition(SessionState.DONE)

    async def decline_fallback(self) -> SessionSnapshot:
        self._require_fallback_offer()
        self._fallback_offered = False
        self._error = None
        return await self._transition(SessionState.IDLE)

    def _require_fallback_offer(self) -> None:
        if self._state is not SessionState.AWAITING_FALLBACK_CHOICE:
            raise FallbackUnavailableError(
                f"No screenshot fallback is on offer (session is {self._state.value})."
            )

    def _is_stale(self, token: int) -> bool:
        if token != self._attempt:
            logger.info(
                "discarding stale attempt result",
                extra={"session_id": self.session_id, "attempt": token, "current_attempt": self._attempt},
            )
            return True
        return False

    async def _fail(self, message: str) -> SessionSnapshot:
        self._error = message
        return await self._transition(SessionState.FAILED)

    async def _transition(self, state: SessionState) -> SessionSnapshot:
        self._state = state
        snapshot = self.snapshot()
        logger.debug(
            "session state changed",
            extra={"session_id": self.session_id, "attempt": self._attempt, "state": state.value},
        )
        await emit_event(self.on_event, STATE_EVENT, snapshot.model_dump(mode="json", by_alias=True))
        return snapshot
