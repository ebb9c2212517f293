"""Pydantic Settings: loads configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    gemini_api_key: str

    gateway_backend: Literal["genai", "agent"] = "genai"
    llm_model: str = "gemini-2.5-flash"
    agent_model: str = "google-gla:gemini-2.5-flash"
    enable_web_search: bool = True

    capture_strategy: Literal["headless", "tab"] = "headless"
    browser_headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 800
    navigation_timeout_seconds: float = 30.0
    scroll_settle_ms: int = 500
    max_frames: int = 30
    jpeg_quality: int = 80

    cdp_endpoint: str = "http://localhost:9222"
    tab_stabilize_ms: int = 300
    frame_timeout_seconds: float = 5.0

    max_sessions: int = 1000
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
