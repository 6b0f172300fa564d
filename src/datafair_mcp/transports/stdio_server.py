# Data Fair MCP Server
# File: transports/stdio_server.py
# Version: v1

"""STDIO entrypoint for the Data Fair MCP server.

Two server families can be served to a single local client:

- ``datasets``: the catalog server (resources, tools, prompts),
- ``dataset <datasetId>``: the information resource of one dataset.
"""

from __future__ import annotations

import logging
from typing import Optional

import anyio

from ..config import ConfigError, DataFairConfig
from ..server import build_dataset_server, build_server

logger = logging.getLogger(__name__)

FAMILIES = ("datasets", "dataset")


def check_family(family: Optional[str], dataset_id: Optional[str]) -> None:
    """Validate the positional arguments before anything is started."""
    if not family:
        raise ConfigError(
            "Expected at least 1 argument: MCP server type "
            f"(supported: {', '.join(FAMILIES)})."
        )
    if family not in FAMILIES:
        raise ConfigError(
            f"MCP server type unknown, expected one of {', '.join(FAMILIES)}, got '{family}'."
        )
    if family == "dataset" and not dataset_id:
        raise ConfigError('Expected 2 arguments: "dataset" and a datasetId.')


def main(
    config: Optional[DataFairConfig] = None,
    family: str = "datasets",
    dataset_id: Optional[str] = None,
) -> None:
    """Build the requested server and let FastMCP run the stdio transport."""
    config = config or DataFairConfig.from_env()
    check_family(family, dataset_id)

    if family == "dataset":
        mcp = anyio.run(build_dataset_server, config, dataset_id)
    else:
        mcp = build_server(config)

    logger.info("Serving Data Fair MCP (%s) over stdio", family)
    mcp.run(transport="stdio")
