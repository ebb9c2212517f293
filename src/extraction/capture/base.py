"""Capture protocol and scroll arithmetic."""

from __future__ import annotations

from typing import Protocol

from src.extraction.events import EventCallback
from src.extraction.models import ImageFrame


class PageCapture(Protocol):
    """Protocol for page capture strategies.

    Implementations return frames in top-to-bottom order and release any
    browser resources before returning or raising.
    """

    async def capture_full_page(
        self, url: str, on_event: EventCallback | None = None
    ) -> list[ImageFrame]: ...


def scroll_offsets(page_height: int, viewport_height: int) -> list[int]:
    """Scroll positions that cover a page of *page_height* one viewport at a time.

    Yields ``ceil(page_height / viewport_height)`` offsets, and always at least
    the top of the page.
    """
    if viewport_height <= 0:
        raise ValueError("viewport_height must be positive")
    return list(range(0, max(page_height, 1), viewport_height))
