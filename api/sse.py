"""Server-Sent Events helpers shared by the streaming routes."""

import json
import logging
from typing import AsyncGenerator, AsyncIterator

from fastapi.responses import StreamingResponse

from api.errors import error_payload
from api.schemas.consult import StreamEvent, StreamEventType
from medicrew.models.consultation import StageEvent


logger = logging.getLogger(__name__)

DONE_SENTINEL = "data: [DONE]\n\n"


def format_sse(event: StreamEvent) -> str:
    """Format event for SSE."""
    return f"event: {event.event.value}\ndata: {json.dumps(event.data)}\n\n"


async def stage_event_stream(
    stages: AsyncIterator[StageEvent],
    session_id: str,
) -> AsyncGenerator[str, None]:
    """
    Frame a workflow's stage events as SSE.

    Emits a start event, one `stage` event per completed stage and a
    completion event. A failure mid-run becomes a single `error` event.
    The stream always ends with the [DONE] sentinel.
    """
    try:
        yield format_sse(StreamEvent(
            event=StreamEventType.CONSULTATION_START,
            data={"sessionId": session_id},
        ))
        async for stage in stages:
            yield format_sse(StreamEvent(
                event=StreamEventType.STAGE,
                data=stage.model_dump(mode="json"),
            ))
        yield format_sse(StreamEvent(
            event=StreamEventType.CONSULTATION_COMPLETE,
            data={"sessionId": session_id},
        ))
    except Exception as e:
        logger.error(f"Streaming error in session {session_id}: {e}")
        yield format_sse(StreamEvent(event=StreamEventType.ERROR, data=error_payload(e)))
    yield DONE_SENTINEL


def sse_response(body: AsyncGenerator[str, None]) -> StreamingResponse:
    return StreamingResponse(
        body,
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
