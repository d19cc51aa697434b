"""
SSE Transport

Carries MCP JSON-RPC messages over two HTTP endpoints:

    GET  /mcp                           long-lived Server-Sent Events stream
    POST /mcp/messages?sessionId=<id>   client -> server messages

Opening the stream registers a session whose transport handle is the write
side of the session's inbound message stream. The first SSE event
(``endpoint``) tells the client where to post. Posted messages are fed
into that stream in arrival order; responses are written back as
``message`` events.

When the stream ends the session is removed from the registry. Responses
still being produced for it are discarded instead of failing the process.
"""

from contextlib import asynccontextmanager
from typing import Any

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.shared.message import SessionMessage
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from .errors import UnknownSession
from .logging_config import get_logger
from .sessions import SessionRegistry

logger = get_logger(__name__)

CLOSED_STREAM_ERRORS = (anyio.ClosedResourceError, anyio.BrokenResourceError)


def is_closed_stream_error(error: BaseException) -> bool:
    """True for closed-stream errors, or groups made only of them."""
    if isinstance(error, BaseExceptionGroup):
        return all(is_closed_stream_error(inner) for inner in error.exceptions)
    return isinstance(error, CLOSED_STREAM_ERRORS)


class SseTransport:
    """Session-aware SSE transport for a low-level MCP Server."""

    def __init__(self, registry: SessionRegistry, message_path: str):
        """
        Initialize transport.

        Args:
            registry: Registry owning the sessions opened by this transport
            message_path: Path clients post messages to
        """
        self.registry = registry
        self.message_path = message_path

    @asynccontextmanager
    async def connect_sse(self, scope: Scope, receive: Receive, send: Send):
        """
        Open an SSE stream and register its session.

        Yields:
            (read_stream, write_stream) for ``Server.run``
        """
        read_stream_writer, read_stream = anyio.create_memory_object_stream[
            SessionMessage | Exception
        ](0)
        write_stream, write_stream_reader = anyio.create_memory_object_stream[SessionMessage](0)
        sse_stream_writer, sse_stream_reader = anyio.create_memory_object_stream[dict[str, Any]](0)

        session_id = self.registry.open(read_stream_writer)
        endpoint = f"{self.message_path}?sessionId={session_id}"

        async def sse_writer():
            async with sse_stream_writer, write_stream_reader:
                await sse_stream_writer.send({"event": "endpoint", "data": endpoint})

                async for session_message in write_stream_reader:
                    if not self.registry.is_open(session_id):
                        logger.debug(
                            "Discarding message for closed session",
                            extra={"session_id": session_id},
                        )
                        continue

                    await sse_stream_writer.send(
                        {
                            "event": "message",
                            "data": session_message.message.model_dump_json(
                                by_alias=True, exclude_none=True
                            ),
                        }
                    )

        async def response_wrapper(scope: Scope, receive: Receive, send: Send):
            try:
                await EventSourceResponse(
                    content=sse_stream_reader, data_sender_callable=sse_writer
                )(scope, receive, send)
            finally:
                self.registry.close(session_id)
                await read_stream_writer.aclose()
                await write_stream_reader.aclose()

        async with anyio.create_task_group() as tg:
            tg.start_soon(response_wrapper, scope, receive, send)
            try:
                yield read_stream, write_stream
            finally:
                self.registry.close(session_id)
                await read_stream_writer.aclose()
                await write_stream.aclose()

    async def post_message(self, scope: Scope, receive: Receive, send: Send):
        """Forward one posted JSON-RPC message into its session's stream."""
        request = Request(scope, receive)

        session_id = request.query_params.get("sessionId")
        if not session_id:
            response = Response("Missing sessionId parameter", status_code=400)
            return await response(scope, receive, send)

        try:
            session = self.registry.require(session_id)
        except UnknownSession as e:
            logger.warning(e.message, extra={"session_id": session_id})
            response = Response("Unknown session", status_code=404)
            return await response(scope, receive, send)

        body = await request.body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as err:
            logger.warning(f"Could not parse message: {err}", extra={"session_id": session_id})
            response = Response("Could not parse message", status_code=400)
            await response(scope, receive, send)
            await self._forward(session_id, session.writer, err)
            return

        if not await self._forward(session_id, session.writer, SessionMessage(message)):
            response = Response("Unknown session", status_code=404)
            return await response(scope, receive, send)

        response = Response("Accepted", status_code=202)
        await response(scope, receive, send)

    async def _forward(self, session_id: str, writer, item) -> bool:
        try:
            await writer.send(item)
        except CLOSED_STREAM_ERRORS:
            logger.info("Session stream closed while posting", extra={"session_id": session_id})
            self.registry.close(session_id)
            return False
        return True


class SseEndpoint:
    """ASGI endpoint that runs an MCP Server over one SSE stream per request."""

    def __init__(self, transport: SseTransport, server: Server):
        self.transport = transport
        self.server = server

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        try:
            async with self.transport.connect_sse(scope, receive, send) as (read, write):
                await self.server.run(read, write, self.server.create_initialization_options())
        except Exception as e:
            if not is_closed_stream_error(e):
                raise
            logger.debug(f"Dropped write to closed session stream: {e!r}")


class MessageEndpoint:
    """ASGI endpoint for client -> server message posts."""

    def __init__(self, transport: SseTransport):
        self.transport = transport

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        await self.transport.post_message(scope, receive, send)
