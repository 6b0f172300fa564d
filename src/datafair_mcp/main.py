# Data Fair MCP Server
# File: main.py
# Version: v1

"""Command-line entry point (the ``datafair-mcp`` console script).

Usage::

    datafair-mcp datasets                  # catalog server over stdio
    datafair-mcp dataset <datasetId>       # single-dataset server over stdio
    datafair-mcp --transport http          # SSE + stateless HTTP server

The transport defaults to DATAFAIR_MCP_TRANSPORT (``stdio`` when unset).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import TRANSPORTS, ConfigError, DataFairConfig, normalize_transport

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    # stdout carries the stdio protocol frames: logs go to stderr.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="datafair-mcp",
        description="MCP server exposing a Data Fair dataset catalog.",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS + ("sse",),
        default=None,
        help="stdio (default) or http (SSE and stateless streamable HTTP).",
    )
    parser.add_argument(
        "family",
        nargs="?",
        default=None,
        help='stdio only: "datasets" (catalog server) or "dataset" (single dataset).',
    )
    parser.add_argument(
        "dataset_id",
        nargs="?",
        default=None,
        help='stdio only: dataset id, required with "dataset".',
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    config = DataFairConfig.from_env()
    if args.transport:
        config.transport = normalize_transport(args.transport)

    configure_logging(config.log_level)

    try:
        config.validate()
        if config.transport == "stdio":
            from .transports import stdio_server

            stdio_server.check_family(args.family, args.dataset_id)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        raise SystemExit(2) from exc

    if config.transport == "http":
        from .transports import http_server

        http_server.main(config)
    else:
        from .transports import stdio_server

        stdio_server.main(config, family=args.family, dataset_id=args.dataset_id)


if __name__ == "__main__":
    main()
