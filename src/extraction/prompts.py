"""Prompt templates for URL and screenshot extraction."""

from __future__ import annotations

from enum import Enum

from src.extraction.models import FAILED_TITLE


class InputKind(str, Enum):
    URL = "url"
    IMAGE = "image"
    IMAGE_SEQUENCE = "image_sequence"


URL_INTRO = """\
You are an expert web content extraction agent. Your goal is to visit a URL, \
analyze its content, and extract the core article information, returning it \
as a clean JSON object.

URL to analyze: {url}

**Primary Goal:** Extract the main article's title, text content, and primary image.
"""

IMAGE_INTRO = """\
You are an expert Optical Character Recognition (OCR) and content extraction \
agent. Your goal is to analyze the provided screenshot of a news article and \
extract its core content.
"""

IMAGE_SEQUENCE_INTRO = """\
You are an expert Optical Character Recognition (OCR) and content extraction \
agent. Your goal is to analyze the provided screenshots of a news article and \
extract its core content. The {frame_count} screenshots are sequential, ordered \
from the top of the page to the bottom, and represent a scrolling page.
"""

URL_STEPS = """\
1.  **Analyze the Page**: Access the content at the provided URL. Be aware that \
some pages use client-side rendering; your analysis should account for the \
fully rendered content.

2.  **Extract Title**: Find the most appropriate title for the article.
    *   **Priority 1**: The text inside the first `<h1>` tag.
    *   **Priority 2**: If no `<h1>` exists, use the content of the document's `<title>` tag.

3.  **Extract Main Image URL**: Find the most representative image for the article.
    *   **Priority 1**: The URL from the `content` attribute of `<meta property="og:image">`.
    *   **Priority 2**: The URL from the `content` attribute of `<meta name="twitter:image">`.
    *   **Priority 3**: The URL from the `src` attribute of the largest, most \
prominent `<img>` tag that appears to be the main article image.
    *   Ensure the final URL is absolute. If no suitable image is found, return `null`.

4.  **Extract and Clean Text Content**: This is the most critical step.
    *   Intelligently identify the main block of text that constitutes the \
article body. Use semantic tags like `<article>`, `<main>`, and header tags \
(`<h2>`, `<h3>`) as clues, but your primary focus should be on identifying the \
largest contiguous block of paragraph text.
    *   **Aggressively clean the text**:
        *   Remove all content from navigational elements (`<nav>`), headers \
(`<header>`), footers (`<footer>`), sidebars (`<aside>`), advertisements, and pop-ups.
        *   Strip out all scripts, styles, and iframes.
        *   Remove common non-content sections like "Related Articles", \
"Comments", or social sharing buttons.
{cleaning}
"""

IMAGE_STEPS = """\
1.  **Identify the Title**: Find the largest, most prominent text at the top \
of the article. This is the title.
2.  **Extract Body Text**: Read all the paragraphs that form the main body of the article.
3.  **Clean the Content**:
    *   Be meticulous. Exclude any text from advertisements, navigation menus, \
"related articles" sections, cookie banners, or headers/footers.
    *   Combine the extracted paragraphs into a single string.
{cleaning}
"""

IMAGE_SEQUENCE_STEPS = """\
1.  **Synthesize Content**: Treat the series of images as a single, continuous \
document. Adjacent screenshots may overlap.
2.  **Identify the Title**: Find the largest, most prominent heading text at \
the top of the article in the first screenshot only.
3.  **Extract Body Text**: Read all the paragraphs that form the main body of \
the article across all screenshots, in order.
4.  **Clean the Content**:
    *   Be meticulous. Exclude any text from advertisements, navigation menus, \
"related articles" sections, cookie banners, or headers/footers.
    *   Combine the extracted paragraphs into a single, coherent string.
    *   Deduplicate any overlapping text between adjacent screenshots.
{cleaning}
"""

WHITESPACE_RULES = """\
{pad}*   Normalize whitespace: replace multiple spaces, newlines, or tabs with a single space.
{pad}*   Trim leading/trailing whitespace from the final result."""

OUTPUT_FORMAT = """\
**Output Format**: Return **ONLY** a raw JSON object with the specified \
structure. Do not include any explanatory text or markdown formatting \
(like ```json).{image_note}

**JSON Structure:**
{{
  "title": "string",
  "textContent": "string",
  "imageUrl": {image_type}
}}
"""

ERROR_HANDLING = """\
**Error Handling & Troubleshooting**:
    *   If you are blocked from accessing the {source} (e.g., by a paywall, \
CAPTCHA, or login screen), or if it appears to have no meaningful article \
content, **do not return nulls**. Instead, return a JSON object where the \
`title` is "{failed_title}", the `textContent` is a brief explanation of the \
problem (e.g., "Page requires a login to view content.", "Content is behind a \
paywall.", "I am unable to directly access and parse the full content of the \
provided URL..."), and the `imageUrl` is null.
"""


def build_prompt(kind: InputKind, url: str | None = None, frame_count: int = 0) -> str:
    """Build the extraction prompt for a URL, a single screenshot, or a screenshot sequence.

    All variants share the JSON contract, the whitespace rules and the
    failure sentinel; they differ only in how the source is described.
    """
    # URL cleaning rules sit one list level deeper than the screenshot ones
    cleaning = WHITESPACE_RULES.format(pad=" " * (8 if kind is InputKind.URL else 4))

    if kind is InputKind.URL:
        if not url:
            raise ValueError("url is required for a URL prompt")
        intro = URL_INTRO.format(url=url)
        steps = URL_STEPS.format(cleaning=cleaning)
        output_step = 5
        image_note = ""
        image_type = '"string | null"'
        source = "page"
    elif kind is InputKind.IMAGE:
        intro = IMAGE_INTRO
        steps = IMAGE_STEPS.format(cleaning=cleaning)
        output_step = 4
        image_note = " The `imageUrl` should be set to `null`."
        image_type = "null"
        source = "article in the screenshot"
    else:
        if frame_count < 2:
            raise ValueError("an image sequence prompt needs at least two frames")
        intro = IMAGE_SEQUENCE_INTRO.format(frame_count=frame_count)
        steps = IMAGE_SEQUENCE_STEPS.format(cleaning=cleaning)
        output_step = 5
        image_note = " The `imageUrl` should be set to `null`."
        image_type = "null"
        source = "article in the screenshots"

    output = OUTPUT_FORMAT.format(image_note=image_note, image_type=image_type)
    error_handling = ERROR_HANDLING.format(source=source, failed_title=FAILED_TITLE)
    return (
        f"{intro}\n**Instructions:**\n\n{steps}\n"
        f"{output_step}.  {output}\n"
        f"{output_step + 1}.  {error_handling}"
    )
