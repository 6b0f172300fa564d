# Data Fair MCP Server
# File: transports/http_server.py
# Version: v1

"""HTTP entrypoint: SSE sessions and stateless streamable HTTP on one app.

Routes:

- ``POST /mcp``      : stateless streamable HTTP
- ``GET|DELETE /mcp``: 405, no session exists in stateless mode
- ``GET /sse``       : legacy SSE stream (one session per connection)
- ``POST /messages`` : client-to-server messages for an SSE session
- ``GET /api/datasets/{dataset_id}/sse``     : SSE stream for one dataset
- ``POST /api/datasets/{dataset_id}/messages``: messages for such a stream
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import uvicorn
from mcp.server.fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.routing import Route

from ..config import DataFairConfig
from ..server import build_server
from ..sessions import SessionRegistry
from .sse import (
    DATASET_MESSAGES_PATH,
    DATASET_SSE_PATH,
    MESSAGES_PATH,
    DatasetSseEndpoint,
    SseEndpoint,
    handle_post_message,
)
from .streamable_http import StatelessEndpoint, method_not_allowed

logger = logging.getLogger(__name__)


def create_app(
    config: DataFairConfig,
    server: Optional[FastMCP] = None,
    registry: Optional[SessionRegistry[Any]] = None,
) -> Starlette:
    """Build the Starlette application.

    The catalog server is shared by every connection; dataset streams get a
    server of their own. All SSE sessions share one registry.
    """
    server = server or build_server(config)
    registry = registry if registry is not None else SessionRegistry()

    routes = [
        Route("/mcp", endpoint=StatelessEndpoint(server), methods=["POST"]),
        Route("/mcp", endpoint=method_not_allowed, methods=["GET", "DELETE"]),
        Route("/sse", endpoint=SseEndpoint(server, registry), methods=["GET"]),
        Route(MESSAGES_PATH, endpoint=handle_post_message, methods=["POST"]),
        Route(DATASET_SSE_PATH, endpoint=DatasetSseEndpoint(config, registry), methods=["GET"]),
        Route(DATASET_MESSAGES_PATH, endpoint=handle_post_message, methods=["POST"]),
    ]

    app = Starlette(routes=routes)
    app.state.registry = registry
    app.state.config = config
    return app


def main(config: Optional[DataFairConfig] = None) -> None:
    """Serve the HTTP app with uvicorn until interrupted."""
    config = config or DataFairConfig.from_env()
    app = create_app(config)

    logger.info(
        "Serving Data Fair MCP over HTTP on %s:%s (catalog: %s)",
        config.host,
        config.port,
        config.url,
    )
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
