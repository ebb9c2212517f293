"""Screenshot-based extraction: the model reads the article from images."""

from __future__ import annotations

import logging
from typing import Sequence

from src.extraction.gateway import ContentGateway
from src.extraction.models import ArticleData, ImageFrame
from src.extraction.normalizer import normalize
from src.extraction.prompts import InputKind, build_prompt

logger = logging.getLogger(__name__)


class ImageExtractor:
    """Extracts an article from screenshots ordered top to bottom."""

    def __init__(self, gateway: ContentGateway) -> None:
        self._gateway = gateway

    async def extract_from_images(self, frames: Sequence[ImageFrame]) -> ArticleData:
        if not frames:
            raise ValueError("at least one frame is required")

        if len(frames) == 1:
            prompt = build_prompt(InputKind.IMAGE)
        else:
            prompt = build_prompt(InputKind.IMAGE_SEQUENCE, frame_count=len(frames))

        logger.info(
            "image extraction started",
            extra={"frames": len(frames), "bytes": sum(len(f.data) for f in frames)},
        )
        raw = await self._gateway.generate(prompt, images=frames)
        article = normalize(raw)

        # The screenshots are the only image we have; never report one
        if article.image_url is not None:
            article = article.model_copy(update={"image_url": None})

        logger.info(
            "image extraction completed",
            extra={
                "frames": len(frames),
                "failed": article.is_failure,
                "words": len(article.text_content.split()),
            },
        )
        return article
