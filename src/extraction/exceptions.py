"""Exception hierarchy for article extraction."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base exception for all extraction errors."""


class URLValidationError(ExtractionError):
    """Raised when the submitted URL is missing or not an http(s) URL."""


class GatewayError(ExtractionError):
    """Raised when the model could not be invoked or returned nothing."""


class MalformedResponseError(ExtractionError):
    """Raised when the model output is not a valid article record.

    The offending text is kept on ``raw_text`` for diagnosis.
    """

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class NavigationError(ExtractionError):
    """Raised when the browser cannot load the page."""


class CaptureError(ExtractionError):
    """Raised when screenshots or tab frames cannot be taken."""


class FallbackUnavailableError(ExtractionError):
    """Raised when a fallback choice is made while none is on offer."""
