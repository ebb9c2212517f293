"""Page capture submodule with pluggable capture strategies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import PageCapture, scroll_offsets
from .headless import HeadlessPageCapture
from .tab import TabCapture

if TYPE_CHECKING:
    from src.config import Settings

__all__ = [
    "HeadlessPageCapture",
    "PageCapture",
    "TabCapture",
    "build_capture_service",
    "scroll_offsets",
]

logger = logging.getLogger(__name__)


def build_capture_service(settings: Settings) -> PageCapture:
    """Build the capture strategy selected by ``settings.capture_strategy``."""
    if settings.capture_strategy == "tab":
        logger.debug("using tab capture", extra={"cdp_endpoint": settings.cdp_endpoint})
        return TabCapture(
            settings.cdp_endpoint,
            stabilize_delay=settings.tab_stabilize_ms / 1000,
            frame_timeout=settings.frame_timeout_seconds,
            jpeg_quality=settings.jpeg_quality,
        )

    logger.debug("using headless page capture", extra={"headless": settings.browser_headless})
    return HeadlessPageCapture(
        headless=settings.browser_headless,
        viewport_width=settings.viewport_width,
        viewport_height=settings.viewport_height,
        navigation_timeout=settings.navigation_timeout_seconds,
        settle_delay=settings.scroll_settle_ms / 1000,
        max_frames=settings.max_frames,
        jpeg_quality=settings.jpeg_quality,
    )
