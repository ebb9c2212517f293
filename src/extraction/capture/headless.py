"""Full-page capture in a headless Chromium driven by Playwright.

The page is scrolled one viewport at a time and each viewport is saved as a
JPEG. Playwright browsers must be installed separately:

    playwright install chromium
"""

from __future__ import annotations

import asyncio
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from src.extraction.capture.base import scroll_offsets
from src.extraction.events import EventCallback, emit_frame
from src.extraction.exceptions import CaptureError, NavigationError
from src.extraction.models import ImageFrame

logger = logging.getLogger(__name__)

_PAGE_HEIGHT_JS = "() => document.body.scrollHeight"
_SCROLL_JS = "(y) => window.scrollTo(0, y)"


class HeadlessPageCapture:
    """Captures a page as a sequence of viewport screenshots.

    The settle delay after each scroll is a wait-for-paint heuristic for lazy
    images and late layout, not a render-complete signal.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        viewport_width: int = 1280,
        viewport_height: int = 800,
        navigation_timeout: float = 30.0,
        settle_delay: float = 0.5,
        max_frames: int = 30,
        jpeg_quality: int = 80,
    ) -> None:
        self._headless = headless
        self._viewport = {"width": viewport_width, "height": viewport_height}
        self._navigation_timeout = navigation_timeout
        self._settle_delay = settle_delay
        self._max_frames = max_frames
        self._jpeg_quality = jpeg_quality

    async def capture_full_page(
        self, url: str, on_event: EventCallback | None = None
    ) -> list[ImageFrame]:
        """Load *url* and return one JPEG frame per viewport, top to bottom.

        Raises:
            NavigationError: If the page cannot be loaded.
            CaptureError: If the browser cannot start or a screenshot fails.
        """
        async with async_playwright() as pw:
            try:
                browser = await pw.chromium.launch(headless=self._headless)
            except PlaywrightError as exc:
                logger.error("failed to launch browser", extra={"error": str(exc)})
                raise CaptureError(f"Failed to launch browser: {exc}") from exc

            try:
                try:
                    page = await browser.new_page(viewport=self._viewport)
                except PlaywrightError as exc:
                    raise CaptureError(f"Failed to open a browser page: {exc}") from exc
                await self._navigate(page, url)
                return await self._scroll_and_capture(page, url, on_event)
            finally:
                await _close_browser(browser, url)

    async def _navigate(self, page, url: str) -> None:
        """Load *url*, settling for DOM-ready when the network never goes idle.

        Pages with analytics beacons or long polling can keep connections open
        indefinitely; those are still captured once the DOM is ready.
        """
        logger.info("loading page", extra={"url": url})
        timeout_ms = self._navigation_timeout * 1000
        try:
            try:
                response = await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            except PlaywrightTimeoutError:
                logger.warning("network never went idle, retrying for dom ready", extra={"url": url})
                response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightError as exc:
            logger.warning("page navigation failed", extra={"url": url, "error": str(exc)})
            raise NavigationError(f"Failed to load {url}: {exc}") from exc

        if response is not None and response.status >= 400:
            raise NavigationError(f"Failed to load {url}: HTTP {response.status}")

    async def _scroll_and_capture(
        self, page, url: str, on_event: EventCallback | None
    ) -> list[ImageFrame]:
        try:
            page_height = int(await page.evaluate(_PAGE_HEIGHT_JS) or 0)
        except PlaywrightError as exc:
            raise CaptureError(f"Failed to measure page height: {exc}") from exc
        viewport_height = (page.viewport_size or self._viewport)["height"]

        offsets = scroll_offsets(page_height, viewport_height)
        if len(offsets) > self._max_frames:
            logger.warning(
                "page taller than frame limit, truncating",
                extra={"url": url, "frames_needed": len(offsets), "max_frames": self._max_frames},
            )
            offsets = offsets[: self._max_frames]

        logger.info(
            "capturing page",
            extra={
                "url": url,
                "page_height": page_height,
                "viewport_height": viewport_height,
                "frames": len(offsets),
            },
        )

        frames: list[ImageFrame] = []
        for index, offset in enumerate(offsets):
            try:
                await page.evaluate(_SCROLL_JS, offset)
                await asyncio.sleep(self._settle_delay)
                data = await page.screenshot(type="jpeg", quality=self._jpeg_quality)
            except PlaywrightError as exc:
                raise CaptureError(f"Failed to capture frame {index + 1}: {exc}") from exc
            frames.append(ImageFrame(data=data))
            await emit_frame(on_event, index, offset, len(offsets))

        logger.debug("page captured", extra={"url": url, "frames": len(frames)})
        return frames


async def _close_browser(browser, url: str) -> None:
    # A crashed browser fails to close; that must not mask the capture result
    try:
        await browser.close()
        logger.debug("browser closed", extra={"url": url})
    except PlaywrightError as exc:
        logger.warning("error closing browser", extra={"url": url, "error": str(exc)})
