"""In-memory registry of orchestrator sessions, one per user."""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict

from src.extraction.capture import PageCapture
from src.extraction.direct import UrlExtractor
from src.extraction.orchestrator import ArticleGrabber
from src.extraction.vision import ImageExtractor

logger = logging.getLogger(__name__)


def _generate_session_id() -> str:
    return uuid.uuid4().hex[:12]


class SessionRegistry:
    """Creates and looks up ArticleGrabber sessions.

    Nothing is persisted. When ``max_sessions`` is reached the least recently
    used session is dropped.
    """

    def __init__(
        self,
        url_extractor: UrlExtractor,
        capture: PageCapture,
        image_extractor: ImageExtractor,
        max_sessions: int = 1000,
    ) -> None:
        self._url_extractor = url_extractor
        self._capture = capture
        self._image_extractor = image_extractor
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ArticleGrabber] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> ArticleGrabber:
        session_id = _generate_session_id()
        grabber = ArticleGrabber(
            self._url_extractor,
            self._capture,
            self._image_extractor,
            session_id=session_id,
        )
        self._sessions[session_id] = grabber
        while len(self._sessions) > self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("session evicted", extra={"session_id": evicted})
        logger.debug("session created", extra={"session_id": session_id, "sessions": len(self._sessions)})
        return grabber

    def get(self, session_id: str) -> ArticleGrabber | None:
        grabber = self._sessions.get(session_id)
        if grabber is not None:
            self._sessions.move_to_end(session_id)
        return grabber

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None
