"""Progress events raised while an article is being grabbed.

Three kinds of event reach the callback:

- ``status``: a pipeline step started (``{"step", "message"}``).
- ``frame``: one screenshot was taken (``{"index", "offset", "total"}``).
- ``state``: an orchestrator session changed state (a session snapshot).

The SSE route forwards them to the client unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

STATUS_EVENT = "status"
FRAME_EVENT = "frame"
STATE_EVENT = "state"

EventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


async def emit_event(
    on_event: EventCallback | None,
    event: str,
    data: dict[str, Any] | None = None,
) -> None:
    """Emit a pipeline event if a callback is registered."""
    if on_event:
        logger.debug("pipeline event emitted", extra={"event": event})
        await on_event(event, data or {})


async def emit_status(on_event: EventCallback | None, step: str, message: str) -> None:
    await emit_event(on_event, STATUS_EVENT, {"step": step, "message": message})


async def emit_frame(on_event: EventCallback | None, index: int, offset: int, total: int) -> None:
    await emit_event(on_event, FRAME_EVENT, {"index": index, "offset": offset, "total": total})
