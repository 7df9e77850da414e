"""
Server-sent events stream of data changes.

Every mutation publishes {"type": "data_change", "collection": ...}; clients
re-fetch the named collection. Comment lines keep idle connections open.
"""

import asyncio
import json
import logging
from typing import Dict

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from roadledger.app.core.config import settings
from roadledger.app.services.change_notifier import broadcaster

router = APIRouter(prefix="/events", tags=["Events"])

logger = logging.getLogger("roadledger.events")

KEEPALIVE = ": keep-alive\n\n"


def format_sse(event: Dict[str, str]) -> str:
    """Encode one event as an SSE data frame."""
    return f"data: {json.dumps(event)}\n\n"


async def event_stream(request: Request, queue: asyncio.Queue, keepalive_seconds: float):
    try:
        yield ": connected\n\n"
        while True:
            if await request.is_disconnected():
                break
            try:
                event = await asyncio.wait_for(queue.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield KEEPALIVE
                continue
            yield format_sse(event)
    finally:
        broadcaster.unsubscribe(queue)
        logger.info("Events client disconnected (%s open)", broadcaster.subscriber_count)


@router.get("")
async def stream_events(request: Request):
    queue = broadcaster.subscribe()
    logger.info("Events client connected (%s open)", broadcaster.subscriber_count)
    return StreamingResponse(
        event_stream(request, queue, settings.sse_keepalive_seconds),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
