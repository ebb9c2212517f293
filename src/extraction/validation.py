"""Input URL validation."""

from __future__ import annotations

from urllib.parse import urlparse

from src.extraction.exceptions import URLValidationError

_VALID_SCHEMES = {"http", "https"}


def validate_url(url: str | None) -> str:
    """Return the stripped *url*, or raise URLValidationError.

    Requires an http or https scheme and a non-empty host.
    """
    if url is None or not url.strip():
        raise URLValidationError("Please enter a valid URL.")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in _VALID_SCHEMES or not parsed.netloc:
        raise URLValidationError("Please enter a full URL starting with http:// or https://")
    if not parsed.hostname:
        raise URLValidationError("Please enter a full URL starting with http:// or https://")
    return url
