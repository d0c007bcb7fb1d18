"""SSE stream sessions and the buffer for deliveries that beat the handshake."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Protocol

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp import types
from mcp.server.lowlevel import Server
from mcp.shared.message import SessionMessage
from pydantic import ValidationError as PydanticValidationError

from mcp_optimizer.errors.exceptions import SessionError

logger = logging.getLogger(__name__)

MESSAGE_PATH = "/messages"


@dataclass
class PendingPost:
    """A delivery received before any stream session was open."""

    body: bytes
    path: str
    headers: dict[str, str] = field(default_factory=dict)


class MessageSink(Protocol):
    """Anything that can accept a raw JSON-RPC delivery."""

    async def deliver(self, body: bytes) -> None: ...


def format_sse(event: str, data: str) -> str:
    """Frame one Server-Sent Event."""
    lines = "".join(f"data: {line}\n" for line in data.splitlines() or [""])
    return f"event: {event}\n{lines}\n"


class StreamSession:
    """
    One MCP session bound to a long-lived SSE response.

    Deliveries are parsed as JSON-RPC and pushed into the MCP server's read
    stream; everything the server writes is framed as ``message`` events.
    """

    def __init__(self, server: Server, message_path: str = MESSAGE_PATH) -> None:
        self.server = server
        self.session_id = uuid.uuid4().hex
        self.message_path = message_path

        self._read_writer: MemoryObjectSendStream[SessionMessage | Exception]
        self._read_reader: MemoryObjectReceiveStream[SessionMessage | Exception]
        self._write_writer: MemoryObjectSendStream[SessionMessage]
        self._write_reader: MemoryObjectReceiveStream[SessionMessage]
        self._read_writer, self._read_reader = anyio.create_memory_object_stream(0)
        self._write_writer, self._write_reader = anyio.create_memory_object_stream(0)
        self._task: asyncio.Task[None] | None = None

    @property
    def endpoint(self) -> str:
        return f"{self.message_path}?session_id={self.session_id}"

    def start(self) -> None:
        """Start the MCP server loop for this session."""
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        try:
            await self.server.run(
                self._read_reader,
                self._write_writer,
                self.server.create_initialization_options(),
            )
        except Exception as e:
            logger.exception(f"Stream session {self.session_id} failed: {e}")
        finally:
            await self._write_writer.aclose()

    async def deliver(self, body: bytes) -> None:
        """
        Hand one JSON-RPC message to the session.

        Raises:
            SessionError: If the body is not a JSON-RPC message or the session is closed.
        """
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except PydanticValidationError as e:
            raise SessionError(f"Could not parse message: {e}") from e

        try:
            await self._read_writer.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            raise SessionError(f"Session {self.session_id} is closed") from e

    async def events(self) -> AsyncIterator[str]:
        """SSE frames: the endpoint announcement, then server messages until closed."""
        yield format_sse("endpoint", self.endpoint)
        async with self._write_reader:
            async for session_message in self._write_reader:
                payload = session_message.message.model_dump_json(by_alias=True, exclude_none=True)
                yield format_sse("message", payload)

    async def close(self) -> None:
        """Stop the server loop and release the streams."""
        await self._read_writer.aclose()
        try:
            if self._task is not None and not self._task.done():
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    current = asyncio.current_task()
                    # Only the server task's cancellation is ours to absorb
                    if current is not None and current.cancelling():
                        raise
        finally:
            await self._read_reader.aclose()
            await self._write_writer.aclose()
            await self._write_reader.aclose()
            logger.info(f"Stream session {self.session_id} closed")


class SessionHub:
    """
    Routes deliveries to the active stream session.

    Deliveries that arrive while no session is active are kept in ``pending``
    and replayed, in arrival order, as soon as a session is activated. Only
    touched from the event loop, so no lock is held around the state.
    """

    def __init__(self) -> None:
        self.active: MessageSink | None = None
        self.pending: list[PendingPost] = []
        self._replay_task: asyncio.Task[None] | None = None

    async def deliver(self, post: PendingPost) -> bool:
        """
        Deliver to the active session, or buffer if none is open.

        Returns True if the session received the message, False if buffered.

        Raises:
            SessionError: If the active session rejected the message.
        """
        if self.active is None:
            self.pending.append(post)
            logger.info(
                f"No active session, buffered delivery to {post.path} ({len(self.pending)} pending)"
            )
            return False

        # Earlier buffered deliveries go first
        if self._replay_task is not None and not self._replay_task.done():
            await asyncio.shield(self._replay_task)

        await self.active.deliver(post.body)
        return True

    def activate(self, session: MessageSink) -> asyncio.Task[None] | None:
        """
        Make ``session`` the active session and replay buffered deliveries.

        The replay runs as a background task so the caller is not blocked;
        the task is returned for callers that want to wait on it.
        """
        self.active = session
        if not self.pending:
            return None

        buffered, self.pending = self.pending, []
        logger.info(f"Replaying {len(buffered)} buffered deliveries")
        self._replay_task = asyncio.create_task(self._replay(session, buffered))
        return self._replay_task

    def deactivate(self, session: MessageSink) -> None:
        """Clear the active session if it is still ``session``."""
        if self.active is session:
            self.active = None

    async def _replay(self, session: MessageSink, buffered: list[PendingPost]) -> None:
        for post in buffered:
            try:
                await session.deliver(post.body)
            except SessionError as e:
                logger.warning(f"Dropped buffered delivery to {post.path}: {e}")
