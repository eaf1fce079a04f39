"""
Chat Routes - The /chat endpoint.

Supports two response styles:
- JSON (default): the full answer, possibly served from the cache
- Server-sent events (`stream: true`): `data: {json}` frames with deltas,
  ending in a single `done` or `error` frame

Validation happens before the stream opens, so a bad request is always a
plain 400 response.
"""
import json
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from omanx.api.dependencies import enforce_rate_limit, get_chat_service
from omanx.core.audit import get_request_id
from omanx.core.logging_config import get_logger
from omanx.models.chat import ChatRequest, ChatResponse, ErrorResponse
from omanx.services.chat_service import ChatService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/chat",
    tags=["Chat"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Provider or server failure"}
    }
)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _sse_frames(events: AsyncIterator[Dict[str, Any]]) -> AsyncIterator[str]:
    """Encode service events as server-sent event frames."""
    async for event in events:
        yield f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


@router.post(
    "",
    response_model=ChatResponse,
    summary="Ask the assistant",
    description="""
    Send a message to OmanX.

    The message is routed to the `scholar` lane (official, knowledge-grounded
    answers for visa, legal, medical, funding and housing-contract topics) or
    the `local` lane (everyday tips around Philadelphia).

    **Body:** `{message, stream?, mode?}` where mode is `official` (default)
    or `community`.

    **Streaming:** with `stream: true` the response is `text/event-stream`:
    `{delta, requestId, lane}` frames, then `{done: true, requestId, lane}`
    or `{error, done: true, requestId, lane}`.
    """
)
async def send_message(
    body: ChatRequest,
    request: Request,
    service: ChatService = Depends(get_chat_service),
    _rate_limit: None = Depends(enforce_rate_limit),
):
    """Process a user message and return (or stream) the assistant's answer."""
    request_id = get_request_id(request)

    turn = service.prepare(body.message, body.mode)

    if body.stream:
        logger.debug(f"Opening event stream: request_id={request_id}, lane={turn.lane.value}")
        return StreamingResponse(
            _sse_frames(service.stream(turn, request_id)),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    result = await service.reply(turn, request_id)

    return ChatResponse(
        text=result.text,
        cached=result.cached,
        request_id=request_id,
        lane=result.lane.value,
        usage=result.usage,
    )
