# Data Fair MCP Server
# File: server.py
# Version: v1

"""Construction of the FastMCP servers exposed by this package.

- ``build_server`` : the catalog server (resources, tools, prompts).
- ``build_dataset_server`` : a resource-only server bound to one dataset.
"""

from __future__ import annotations

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .client import DataFairClient
from .config import DataFairConfig
from .tools import register_all, tasks
from .tools.resources import RESOURCE_PREFIX, dataset_information

logger = logging.getLogger(__name__)

SERVER_NAME = "datafair-datasets-mcp-server"

INSTRUCTIONS = (
    "MCP server for Data Fair data search and retrieval. Data Fair contains primarily "
    "French datasets, so search terms should be in French. Always include sources "
    "(dataset links or filtered dataset URLs) in responses."
)


def build_server(config: Optional[DataFairConfig] = None) -> FastMCP:
    """Create the catalog server with every resource, tool and prompt."""
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)
    register_all(mcp, config)
    return mcp


async def build_dataset_server(
    config: DataFairConfig,
    dataset_id: str,
    client: Optional[DataFairClient] = None,
) -> FastMCP:
    """Create a server describing a single dataset.

    The dataset is fetched once, here: the server is named after its title and
    its information resource is served from that snapshot.
    """
    client = client or tasks._make_client(config)
    detail = await client.get_dataset(dataset_id)
    logger.info("Serving dataset '%s' (%s)", detail.title, detail.id)

    mcp = FastMCP(detail.title, instructions=INSTRUCTIONS)
    info_uri = f"{RESOURCE_PREFIX}/{detail.slug or dataset_id}"
    document = dataset_information(detail)

    @mcp.resource(
        info_uri,
        name="Information",
        title=detail.title,
        description="Description and column information of the dataset.",
        mime_type="text/markdown",
    )
    def information() -> str:
        return document

    return mcp
