"""Model gateways: the only place that talks to a generative model."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, Sequence

from google import genai
from google.genai import types
from pydantic_ai import Agent, BinaryContent

from src.extraction.exceptions import GatewayError
from src.extraction.models import ImageFrame

if TYPE_CHECKING:
    from src.config import Settings

logger = logging.getLogger(__name__)

TEXT_FAILURE_MESSAGE = (
    "Failed to communicate with the AI service. Please check your connection and API key."
)
IMAGE_FAILURE_MESSAGE = "Failed to communicate with the AI service for image analysis."


class ContentGateway(Protocol):
    """Protocol for model gateways."""

    async def generate(
        self,
        prompt: str,
        images: Sequence[ImageFrame] = (),
        *,
        web_search: bool = False,
    ) -> str: ...


def _failure_message(images: Sequence[ImageFrame]) -> str:
    return IMAGE_FAILURE_MESSAGE if images else TEXT_FAILURE_MESSAGE


class GeminiGateway:
    """Calls Gemini through the google-genai async client."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash") -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model

    async def generate(
        self,
        prompt: str,
        images: Sequence[ImageFrame] = (),
        *,
        web_search: bool = False,
    ) -> str:
        """Send the prompt plus any inline images and return the response text."""
        contents: str | list[types.Part]
        if images:
            contents = [types.Part.from_text(text=prompt)]
            contents.extend(
                types.Part.from_bytes(data=frame.data, mime_type=frame.mime_type)
                for frame in images
            )
        else:
            contents = prompt

        config = None
        if web_search:
            config = types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())],
            )

        logger.debug(
            "gemini request",
            extra={"model": self._model, "images": len(images), "web_search": web_search},
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
        except Exception as exc:
            logger.error(
                "gemini request failed",
                extra={"model": self._model, "images": len(images)},
                exc_info=True,
            )
            raise GatewayError(_failure_message(images)) from exc

        _log_usage(self._model, getattr(response, "usage_metadata", None))
        text = response.text
        if not text:
            logger.warning("gemini returned no text", extra={"model": self._model})
            raise GatewayError(f"{_failure_message(images)} The model returned no text.")
        return text


class AgentGateway:
    """Calls any PydanticAI-supported model given as ``provider:model``.

    Web search is not available through this gateway; the flag is ignored.
    """

    def __init__(self, model: str) -> None:
        self._model = model

    async def generate(
        self,
        prompt: str,
        images: Sequence[ImageFrame] = (),
        *,
        web_search: bool = False,
    ) -> str:
        if web_search:
            logger.debug("web search not supported by agent gateway, ignoring", extra={"model": self._model})

        user_prompt: str | list[Any] = prompt
        if images:
            user_prompt = [prompt] + [
                BinaryContent(data=frame.data, media_type=frame.mime_type) for frame in images
            ]

        try:
            agent = Agent(self._model)
            result = await agent.run(user_prompt)
        except Exception as exc:
            logger.error(
                "agent request failed",
                extra={"model": self._model, "images": len(images)},
                exc_info=True,
            )
            raise GatewayError(_failure_message(images)) from exc

        usage = result.usage()
        logger.info(
            "model usage",
            extra={
                "model": self._model,
                "input_tokens": usage.input_tokens or 0,
                "output_tokens": usage.output_tokens or 0,
            },
        )
        if not result.output:
            raise GatewayError(f"{_failure_message(images)} The model returned no text.")
        return result.output


def _log_usage(model: str, usage: Any) -> None:
    if usage is None:
        return
    logger.info(
        "model usage",
        extra={
            "model": model,
            "input_tokens": usage.prompt_token_count or 0,
            "output_tokens": usage.candidates_token_count or 0,
            "total_tokens": usage.total_token_count or 0,
        },
    )


def build_gateway(settings: Settings) -> ContentGateway:
    """Build the gateway selected by ``settings.gateway_backend``."""
    if settings.gateway_backend == "agent":
        return AgentGateway(settings.agent_model)
    return GeminiGateway(api_key=settings.gemini_api_key, model=settings.llm_model)
