"""JSON structured logging configuration.

Every record is one JSON object on stdout carrying ``timestamp``, ``level``,
``logger``, ``message`` and ``service``, plus whatever the call site passed in
``extra`` (url, attempt, frame counts, token usage).
"""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "article-grabber"

# Third-party loggers that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "asyncio")
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def build_formatter() -> JsonFormatter:
    return JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
        static_fields={"service": SERVICE_NAME},
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def setup_logging(log_level: str = "INFO") -> None:
    """Send root, uvicorn and library logs to stdout as JSON lines.

    Unknown level names fall back to INFO. Calling this again replaces the
    handlers rather than stacking them.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _UVICORN_LOGGERS:
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.addHandler(handler)
        uv_logger.propagate = False

    # Keep library chatter out of the way unless we are debugging
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
