# Data Fair MCP Server
# File: transports/sse.py
# Version: v1

"""Server-Sent-Events transport for older MCP clients.

``GET /sse`` opens an event stream and registers a session; the first event
(``endpoint``) tells the client where to POST its messages. Every JSON-RPC
message the server emits is pushed as a ``message`` event. ``POST
/messages?sessionId=...`` feeds client messages into the matching session.

Sessions live in a SessionRegistry owned by the application, not in module
state.

``GET /api/datasets/{dataset_id}/sse`` does the same for a server bound to a
single dataset, built for each connection.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import anyio
from mcp import types
from mcp.server.fastmcp import FastMCP
from mcp.shared.message import SessionMessage
from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from ..client import CatalogHTTPError, DataFairError
from ..config import DataFairConfig
from ..server import build_dataset_server
from ..sessions import ClosedSessionError, SessionError, SessionRegistry

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/messages"
DATASET_SSE_PATH = "/api/datasets/{dataset_id}/sse"
DATASET_MESSAGES_PATH = "/api/datasets/{dataset_id}/messages"


class SseEndpoint:
    """ASGI app serving one SSE stream per request."""

    def __init__(
        self,
        server: Optional[FastMCP],
        registry: SessionRegistry[Any],
        messages_path: str = MESSAGES_PATH,
    ) -> None:
        self.server = server
        self.registry = registry
        self.messages_path = messages_path

    async def get_server(self, scope: Scope) -> FastMCP:
        assert self.server is not None
        return self.server

    def messages_url(self, scope: Scope) -> str:
        return f"{scope.get('root_path', '')}{self.messages_path}"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            server = await self.get_server(scope)
        except DataFairError as exc:
            logger.warning("Could not open SSE stream: %s", exc)
            await _upstream_error(exc)(scope, receive, send)
            return
        lowlevel = server._mcp_server

        read_stream_writer, read_stream = anyio.create_memory_object_stream(0)
        write_stream, write_stream_reader = anyio.create_memory_object_stream(0)
        sse_stream_writer, sse_stream_reader = anyio.create_memory_object_stream(0)

        session_id = self.registry.open(read_stream_writer)
        endpoint = f"{self.messages_url(scope)}?sessionId={session_id}"

        async def sse_writer() -> None:
            async with sse_stream_writer, write_stream_reader:
                await sse_stream_writer.send({"event": "endpoint", "data": endpoint})
                async for session_message in write_stream_reader:
                    await sse_stream_writer.send(
                        {
                            "event": "message",
                            "data": session_message.message.model_dump_json(
                                by_alias=True, exclude_none=True
                            ),
                        }
                    )

        async def run_session() -> None:
            await lowlevel.run(
                read_stream,
                write_stream,
                lowlevel.create_initialization_options(),
            )

        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(run_session)
                response = EventSourceResponse(
                    content=sse_stream_reader,
                    data_sender_callable=sse_writer,
                    headers={"X-Accel-Buffering": "no"},
                )
                await response(scope, receive, send)
                # Client went away: stop the protocol session as well.
                tg.cancel_scope.cancel()
        finally:
            self.registry.close(session_id)
            await read_stream_writer.aclose()


class DatasetSseEndpoint(SseEndpoint):
    """SSE stream for a server bound to the dataset named in the path."""

    def __init__(self, config: DataFairConfig, registry: SessionRegistry[Any]) -> None:
        super().__init__(None, registry, messages_path=DATASET_MESSAGES_PATH)
        self.config = config

    async def get_server(self, scope: Scope) -> FastMCP:
        return await build_dataset_server(self.config, scope["path_params"]["dataset_id"])

    def messages_url(self, scope: Scope) -> str:
        dataset_id = quote(scope["path_params"]["dataset_id"], safe="")
        path = self.messages_path.format(dataset_id=dataset_id)
        return f"{scope.get('root_path', '')}{path}"


def _upstream_error(exc: DataFairError) -> Response:
    if isinstance(exc, CatalogHTTPError):
        return PlainTextResponse(exc.body, status_code=exc.status_code)
    return PlainTextResponse(str(exc), status_code=502)


def _bad_request(message: str) -> Response:
    return PlainTextResponse(message, status_code=400)


async def handle_post_message(request: Request) -> Response:
    """Route a client message to its open SSE session."""
    registry: SessionRegistry[Any] = request.app.state.registry
    session_id = request.query_params.get("sessionId")

    try:
        writer = registry.get(session_id)
    except SessionError as exc:
        logger.warning("Rejected message: %s", exc)
        return _bad_request(str(exc))

    body = await request.body()
    try:
        message = types.JSONRPCMessage.model_validate_json(body)
    except ValidationError as exc:
        logger.warning("Could not parse message for session %s: %s", session_id, exc)
        return _bad_request("Could not parse message")

    try:
        await writer.send(SessionMessage(message=message))
    except (anyio.ClosedResourceError, anyio.BrokenResourceError):
        # The stream closed between lookup and delivery.
        return _bad_request(str(ClosedSessionError(str(session_id))))

    return PlainTextResponse("Accepted", status_code=202)
