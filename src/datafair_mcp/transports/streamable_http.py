# Data Fair MCP Server
# File: transports/streamable_http.py
# Version: v1

"""Stateless streamable-HTTP transport.

Every ``POST /mcp`` carries one JSON-RPC message; a fresh transport and
protocol session are created for it and torn down once it is answered.
There is no session to stream from or to delete, so ``GET`` and ``DELETE``
are refused.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import anyio
from mcp.server.fastmcp import FastMCP
from mcp.server.streamable_http import StreamableHTTPServerTransport
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

INTERNAL_ERROR = -32603
METHOD_NOT_ALLOWED = -32000


def jsonrpc_error(code: int, message: str) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "error": {"code": code, "message": message},
        "id": None,
    }


async def method_not_allowed(request: Request) -> Response:
    logger.info("Received %s MCP request, not supported in stateless mode", request.method)
    return JSONResponse(
        jsonrpc_error(METHOD_NOT_ALLOWED, "Method not allowed."),
        status_code=405,
    )


class StatelessEndpoint:
    """ASGI app answering one MCP message per POST."""

    def __init__(self, server: FastMCP, json_response: bool = True) -> None:
        self.server = server
        self.json_response = json_response

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        lowlevel = self.server._mcp_server
        transport = StreamableHTTPServerTransport(
            mcp_session_id=None,
            is_json_response_enabled=self.json_response,
        )

        response_started = False

        async def tracked_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        async def run_server(*, task_status: Any = anyio.TASK_STATUS_IGNORED) -> None:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                await lowlevel.run(
                    read_stream,
                    write_stream,
                    lowlevel.create_initialization_options(),
                    stateless=True,
                )

        try:
            async with anyio.create_task_group() as tg:
                await tg.start(run_server)
                await transport.handle_request(scope, receive, tracked_send)
                await transport.terminate()
                tg.cancel_scope.cancel()
        except Exception:
            logger.exception("Error handling MCP request")
            if not response_started:
                response = JSONResponse(
                    jsonrpc_error(INTERNAL_ERROR, "Internal server error"),
                    status_code=500,
                )
                await response(scope, receive, send)
