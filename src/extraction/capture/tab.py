"""Single-frame capture of the user's current browser tab.

Attaches to a running Chrome/Chromium over the DevTools protocol, starts a
JPEG screencast of the active tab, grabs one frame and stops the stream. The
browser must be started with ``--remote-debugging-port``.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from src.extraction.events import EventCallback, emit_frame
from src.extraction.exceptions import CaptureError
from src.extraction.models import ImageFrame

logger = logging.getLogger(__name__)


class TabCapture:
    """Grabs one still frame from the current tab of an attached browser.

    The screencast is stopped as soon as a frame is taken, or on any failure,
    so the browser's capture indicator never lingers. The browser itself is
    left running.
    """

    def __init__(
        self,
        cdp_endpoint: str,
        *,
        stabilize_delay: float = 0.3,
        frame_timeout: float = 5.0,
        jpeg_quality: int = 80,
    ) -> None:
        self._cdp_endpoint = cdp_endpoint
        self._stabilize_delay = stabilize_delay
        self._frame_timeout = frame_timeout
        self._jpeg_quality = jpeg_quality

    async def capture_full_page(
        self, url: str, on_event: EventCallback | None = None
    ) -> list[ImageFrame]:
        """Return exactly one frame of the current tab. *url* is only logged."""
        async with async_playwright() as pw:
            try:
                browser = await pw.chromium.connect_over_cdp(self._cdp_endpoint)
            except PlaywrightError as exc:
                logger.warning(
                    "failed to attach to browser",
                    extra={"cdp_endpoint": self._cdp_endpoint, "error": str(exc)},
                )
                raise CaptureError(f"Failed to attach to browser for tab capture: {exc}") from exc

            page = _current_tab(browser)
            if page is None:
                raise CaptureError("Requested tab not found: the browser has no open tabs.")

            logger.info("capturing tab", extra={"url": url, "tab_url": page.url})
            frame = await self._grab_frame(page)

        await emit_frame(on_event, 0, 0, 1)
        return [frame]

    async def _grab_frame(self, page: Any) -> ImageFrame:
        try:
            session = await page.context.new_cdp_session(page)
        except PlaywrightError as exc:
            raise CaptureError(f"Failed to open a capture session: {exc}") from exc

        frames: list[str] = []
        arrived = asyncio.Event()

        async def on_frame(params: dict[str, Any]) -> None:
            frames.append(params["data"])
            arrived.set()
            try:
                await session.send("Page.screencastFrameAck", {"sessionId": params["sessionId"]})
            except PlaywrightError:
                # The stream may already be stopped by the time the ack goes out
                logger.debug("screencast frame ack failed", exc_info=True)

        session.on("Page.screencastFrame", on_frame)
        try:
            await session.send(
                "Page.startScreencast",
                {"format": "jpeg", "quality": self._jpeg_quality},
            )
            await asyncio.sleep(self._stabilize_delay)
            if not frames:
                await asyncio.wait_for(arrived.wait(), timeout=self._frame_timeout)
            data = frames[-1]
        except asyncio.TimeoutError as exc:
            raise CaptureError(
                f"No frame received from the tab within {self._frame_timeout:.1f}s"
            ) from exc
        except PlaywrightError as exc:
            raise CaptureError(f"Tab capture failed: {exc}") from exc
        finally:
            await _stop_stream(session)

        return ImageFrame(data=base64.b64decode(data))


def _current_tab(browser: Any) -> Any | None:
    """The most recently opened page of the first context that has one."""
    for context in browser.contexts:
        if context.pages:
            return context.pages[-1]
    return None


async def _stop_stream(session: Any) -> None:
    # Detach even when stopping fails, or the CDP session leaks
    try:
        await session.send("Page.stopScreencast")
    except PlaywrightError as exc:
        logger.warning("error stopping screencast: %s", exc)
    try:
        await session.detach()
    except PlaywrightError as exc:
        logger.warning("error detaching capture session: %s", exc)
    else:
        logger.debug("screencast stopped")
