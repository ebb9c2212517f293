"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes import router
from src.config import get_settings
from src.extraction.capture import build_capture_service
from src.extraction.direct import UrlExtractor
from src.extraction.gateway import build_gateway
from src.extraction.sessions import SessionRegistry
from src.extraction.vision import ImageExtractor
from src.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A missing GEMINI_API_KEY fails here, before the app accepts requests
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting article grabber service")

    gateway = build_gateway(settings)
    capture = build_capture_service(settings)
    url_extractor = UrlExtractor(gateway, web_search=settings.enable_web_search)
    image_extractor = ImageExtractor(gateway)

    # Attach to app state for dependency injection
    app.state.settings = settings
    app.state.capture = capture
    app.state.url_extractor = url_extractor
    app.state.image_extractor = image_extractor
    app.state.sessions = SessionRegistry(
        url_extractor,
        capture,
        image_extractor,
        max_sessions=settings.max_sessions,
    )

    logger.info(
        "article grabber service ready",
        extra={
            "gateway_backend": settings.gateway_backend,
            "llm_model": settings.llm_model if settings.gateway_backend == "genai" else settings.agent_model,
            "capture_strategy": settings.capture_strategy,
            "web_search": settings.enable_web_search,
        },
    )

    yield

    logger.info("shutting down article grabber service")


app = FastAPI(title="Article Grabber", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
