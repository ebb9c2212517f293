"""Fixtures: mock gateway, article payloads, screenshot frames."""

import json
from unittest.mock import AsyncMock

import pytest

from src.extraction.models import ImageFrame


@pytest.fixture
def make_article_json():
    """Build the JSON text a model would return for an article."""

    def _make(title="Foo", text="Bar baz.", image="https://x.com/i.jpg", **extra):
        payload = {"title": title, "textContent": text, "imageUrl": image}
        payload.update(extra)
        return json.dumps(payload)

    return _make


@pytest.fixture
def gateway(make_article_json):
    """A ContentGateway stand-in that answers with a valid article."""
    gw = AsyncMock()
    gw.generate = AsyncMock(return_value=make_article_json())
    return gw


@pytest.fixture
def frames():
    return [ImageFrame(data=f"frame-{i}".encode()) for i in range(3)]
