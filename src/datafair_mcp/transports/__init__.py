# Data Fair MCP Server
# File: transports/__init__.py
# Version: v1

"""Transports binding the MCP servers to stdio or HTTP."""
