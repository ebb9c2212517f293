"""Prompt builder tests."""

import pytest

from src.extraction.models import FAILED_TITLE
from src.extraction.prompts import InputKind, build_prompt


def test_url_prompt_names_the_url_and_priorities():
    prompt = build_prompt(InputKind.URL, url="https://x.com/story")
    assert "URL to analyze: https://x.com/story" in prompt
    assert 'og:image' in prompt
    assert "twitter:image" in prompt
    assert "`<h1>`" in prompt
    assert '"imageUrl": "string | null"' in prompt


def test_url_prompt_is_deterministic():
    assert build_prompt(InputKind.URL, url="https://x.com") == build_prompt(InputKind.URL, url="https://x.com")


def test_url_prompt_requires_url():
    with pytest.raises(ValueError):
        build_prompt(InputKind.URL)


@pytest.mark.parametrize(
    "kind,kwargs",
    [
        (InputKind.URL, {"url": "https://x.com"}),
        (InputKind.IMAGE, {}),
        (InputKind.IMAGE_SEQUENCE, {"frame_count": 3}),
    ],
)
def test_every_prompt_shares_the_contract(kind, kwargs):
    prompt = build_prompt(kind, **kwargs)
    assert '"title": "string"' in prompt
    assert '"textContent": "string"' in prompt
    assert FAILED_TITLE in prompt
    assert "Normalize whitespace" in prompt
    assert "**ONLY** a raw JSON object" in prompt


def test_image_prompts_null_the_image():
    for prompt in (build_prompt(InputKind.IMAGE), build_prompt(InputKind.IMAGE_SEQUENCE, frame_count=2)):
        assert '"imageUrl": null' in prompt
        assert "cookie banners" in prompt


def test_sequence_prompt_mentions_order_and_dedup():
    prompt = build_prompt(InputKind.IMAGE_SEQUENCE, frame_count=4)
    assert "4 screenshots" in prompt
    assert "first screenshot only" in prompt
    assert "Deduplicate" in prompt


def test_single_image_prompt_has_no_sequence_wording():
    prompt = build_prompt(InputKind.IMAGE)
    assert "Deduplicate" not in prompt
    assert "provided screenshot of a news article" in prompt


def test_sequence_prompt_needs_two_frames():
    with pytest.raises(ValueError):
        build_prompt(InputKind.IMAGE_SEQUENCE, frame_count=1)
