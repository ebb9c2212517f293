"""Service layer: runs extraction pipelines for the API routes."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncGenerator

from src.extraction.capture import PageCapture
from src.extraction.direct import UrlExtractor
from src.extraction.events import EventCallback, emit_status
from src.extraction.models import ArticleData
from src.extraction.vision import ImageExtractor

logger = logging.getLogger(__name__)

GRAB_FAILURE_MESSAGE = "Failed to grab article content."


async def grab_article(
    capture: PageCapture,
    image_extractor: ImageExtractor,
    url: str,
    on_event: EventCallback | None = None,
) -> ArticleData:
    """Capture *url* in the browser and read the article from the screenshots."""
    await emit_status(on_event, "capturing", "Capturing page...")
    frames = await capture.capture_full_page(url, on_event=on_event)
    logger.info("page captured", extra={"url": url, "frames": len(frames)})

    await emit_status(on_event, "analyzing", f"Reading article from {len(frames)} screenshot(s)...")
    return await image_extractor.extract_from_images(frames)


async def extract_article(url_extractor: UrlExtractor, url: str) -> ArticleData:
    """Ask the model to read *url* directly."""
    return await url_extractor.extract_from_url(url)


async def stream_grab(
    capture: PageCapture,
    image_extractor: ImageExtractor,
    url: str,
) -> AsyncGenerator[dict[str, str], None]:
    """Yield SSE-formatted events while grabbing *url*.

    Ends with either a ``result`` or an ``error`` event, then ``done``.
    """
    logger.info("streaming grab started", extra={"url": url})
    queue: asyncio.Queue[tuple[str, dict[str, Any]] | None] = asyncio.Queue()

    async def on_event(event: str, data: dict[str, Any]) -> None:
        await queue.put((event, data))

    async def run_and_signal_done() -> None:
        try:
            article = await grab_article(capture, image_extractor, url, on_event=on_event)
            await queue.put(("result", article.model_dump(mode="json", by_alias=True)))
            logger.info("streaming grab completed", extra={"url": url, "failed": article.is_failure})
        except Exception:
            logger.exception("streaming grab failed", extra={"url": url})
            await queue.put(("error", {"error": GRAB_FAILURE_MESSAGE}))
        finally:
            await queue.put(("done", {}))
            await queue.put(None)  # sentinel

    task = asyncio.create_task(run_and_signal_done())

    try:
        while True:
            item = await queue.get()
            if item is None:
                break
            event, data = item
            yield {"event": event, "data": json.dumps(data)}
    finally:
        # A disconnected client has no use for the result; stop the browser work
        if not task.done():
            task.cancel()
