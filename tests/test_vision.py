"""Image-based extractor tests."""

import pytest

from src.extraction.exceptions import MalformedResponseError
from src.extraction.models import ImageFrame
from src.extraction.vision import ImageExtractor

pytestmark = pytest.mark.asyncio


async def test_single_frame_uses_single_image_prompt(gateway):
    frame = ImageFrame(data=b"only")
    await ImageExtractor(gateway).extract_from_images([frame])

    prompt = gateway.generate.await_args.args[0]
    assert "provided screenshot of a news article" in prompt
    assert "Deduplicate" not in prompt
    assert list(gateway.generate.await_args.kwargs["images"]) == [frame]


async def test_frame_sequence_keeps_order(gateway, frames):
    await ImageExtractor(gateway).extract_from_images(frames)

    prompt = gateway.generate.await_args.args[0]
    assert "3 screenshots" in prompt
    assert [f.data for f in gateway.generate.await_args.kwargs["images"]] == [
        b"frame-0",
        b"frame-1",
        b"frame-2",
    ]


async def test_image_url_is_always_null(gateway, frames):
    article = await ImageExtractor(gateway).extract_from_images(frames)
    assert article.title == "Foo"
    assert article.image_url is None


async def test_no_frames_is_rejected(gateway):
    with pytest.raises(ValueError):
        await ImageExtractor(gateway).extract_from_images([])
    gateway.generate.assert_not_awaited()


async def test_malformed_response_propagates(gateway, frames):
    gateway.generate.return_value = "```json\n{oops}\n```"
    with pytest.raises(MalformedResponseError):
        await ImageExtractor(gateway).extract_from_images(frames)


async def test_web_search_is_not_requested(gateway, frames):
    await ImageExtractor(gateway).extract_from_images(frames)
    assert "web_search" not in gateway.generate.await_args.kwargs
