"""Direct URL extraction: the model fetches and parses the page itself."""

from __future__ import annotations

import logging

from src.extraction.gateway import ContentGateway
from src.extraction.models import ArticleData
from src.extraction.normalizer import normalize
from src.extraction.prompts import InputKind, build_prompt

logger = logging.getLogger(__name__)

# Diagnostics that mean the model could not reach the page, as opposed to
# finding a paywall or an empty page. Only these offer the screenshot fallback.
DIRECT_ACCESS_FAILURE_PHRASES = (
    "unable to directly access",
    "cannot directly access",
    "can't directly access",
    "could not directly access",
    "couldn't directly access",
)


def is_direct_access_failure(article: ArticleData) -> bool:
    """True when *article* is the failure sentinel for an unreachable page."""
    if not article.is_failure:
        return False
    diagnostic = article.text_content.lower()
    return any(phrase in diagnostic for phrase in DIRECT_ACCESS_FAILURE_PHRASES)


class UrlExtractor:
    """Asks the model to fetch a URL and return the article as JSON."""

    def __init__(self, gateway: ContentGateway, web_search: bool = True) -> None:
        self._gateway = gateway
        self.web_search = web_search

    async def extract_from_url(self, url: str) -> ArticleData:
        """Extract the article at *url*.

        Raises GatewayError when the model call fails and MalformedResponseError
        when the reply is not an article record. A sentinel record is returned,
        not raised, when the model reports that it could not read the page.
        """
        logger.info("direct extraction started", extra={"url": url, "web_search": self.web_search})
        prompt = build_prompt(InputKind.URL, url=url)
        raw = await self._gateway.generate(prompt, web_search=self.web_search)
        article = normalize(raw)

        if article.is_failure:
            logger.info(
                "direct extraction reported failure",
                extra={
                    "url": url,
                    "diagnostic": article.text_content[:200],
                    "direct_access_failure": is_direct_access_failure(article),
                },
            )
        else:
            logger.info(
                "direct extraction completed",
                extra={
                    "url": url,
                    "title": article.title[:80],
                    "words": len(article.text_content.split()),
                    "has_image": article.image_url is not None,
                },
            )
        return article
