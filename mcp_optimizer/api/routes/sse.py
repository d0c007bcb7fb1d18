"""SSE session endpoint and its companion message-delivery endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from mcp_optimizer.api.deps import get_context, get_session_hub
from mcp_optimizer.context import AppContext
from mcp_optimizer.errors.exceptions import SessionError
from mcp_optimizer.services.sessions import MESSAGE_PATH, PendingPost, SessionHub, StreamSession

logger = logging.getLogger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/sse")
async def open_session(
    context: AppContext = Depends(get_context),  # noqa: B008
) -> StreamingResponse:
    """
    Open a stream session and make it the active one.

    Deliveries buffered before this handshake are replayed in the background.
    """
    session = StreamSession(context.mcp_server, message_path=MESSAGE_PATH)
    session.start()
    context.sessions.activate(session)
    logger.info(f"Stream session {session.session_id} opened")

    async def stream() -> AsyncIterator[str]:
        try:
            async for frame in session.events():
                yield frame
        finally:
            context.sessions.deactivate(session)
            await session.close()

    return StreamingResponse(stream(), media_type="text/event-stream", headers=SSE_HEADERS)


async def _deliver(request: Request, sessions: SessionHub) -> Response:
    try:
        body = await request.body()
    except Exception as e:
        logger.warning(f"Could not read delivery body: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    post = PendingPost(body=body, path=request.url.path, headers=dict(request.headers))
    try:
        await sessions.deliver(post)
    except SessionError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return Response("Accepted", status_code=202)


@router.post(MESSAGE_PATH)
async def post_message(
    request: Request,
    sessions: SessionHub = Depends(get_session_hub),  # noqa: B008
) -> Response:
    """Deliver a JSON-RPC message to the active session, or buffer it."""
    return await _deliver(request, sessions)


@router.post("/sse{rest:path}")
async def post_sse_message(
    rest: str,
    request: Request,
    sessions: SessionHub = Depends(get_session_hub),  # noqa: B008
) -> Response:
    """Deliveries addressed under ``/sse`` are treated like ``/messages``."""
    return await _deliver(request, sessions)
