# Data Fair MCP Server
# File: tools/__init__.py
# Version: v1

"""Helpers for registering MCP tools, resources and prompts."""

from __future__ import annotations

from typing import Optional

from mcp.server.fastmcp import FastMCP  # type: ignore[import]

from ..config import DataFairConfig
from . import prompts, resources, tasks


def register_all(mcp: FastMCP, config: Optional[DataFairConfig] = None) -> None:
    """Register everything the catalog server exposes."""
    resources.register_resources(mcp, config)
    tasks.register_tools(mcp, config)
    prompts.register_prompts(mcp)
