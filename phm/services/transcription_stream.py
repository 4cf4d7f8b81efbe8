# phm/services/transcription_stream.py
"""
Server-sent events for the live transcription channel.

Nothing is transcribed yet: the stream says hello, pushes one placeholder
message and then keeps the connection open with heartbeats until the
client goes away.
"""
import asyncio
import json
from typing import Any, AsyncIterator, Awaitable, Callable, Dict

from phm.core.logging_config import logger

PLACEHOLDER_TEXT = "Live transcription will appear here..."


def format_sse(event: str, payload: Dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


async def transcription_events(
    visit_session_id: int,
    is_disconnected: Callable[[], Awaitable[bool]],
    heartbeat_seconds: float = 30.0,
) -> AsyncIterator[str]:
    logger.info("transcription_stream_opened", visit_session_id=visit_session_id)
    try:
        yield format_sse("connected", {"type": "connected", "visitSessionId": visit_session_id})
        yield format_sse(
            "transcription",
            {"type": "transcription", "text": PLACEHOLDER_TEXT, "isFinal": False},
        )
        while not await is_disconnected():
            await asyncio.sleep(heartbeat_seconds)
            if await is_disconnected():
                break
            yield format_sse("ping", {"type": "ping"})
    finally:
        logger.info("transcription_stream_closed", visit_session_id=visit_session_id)
