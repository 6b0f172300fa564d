# Data Fair MCP Server
# File: tools/tasks.py
# Version: v1
#
# NOTE: This module is the single place where we define "business logic"
# that is exposed as MCP tools.  The servers simply call
# `register_tools(server, config)` to wire these up.

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Dict, List, Literal, Optional

from mcp.types import CallToolResult, TextContent, ToolAnnotations
from pydantic import BaseModel, Field

from ..client import DataFairClient
from ..config import DataFairConfig
from ..query import (
    MAX_AGGREGATION_COLUMNS,
    validate_aggregation,
    validate_filters,
)
from .schemas import (
    AggregateDataOutput,
    DescribeDatasetOutput,
    SearchDataOutput,
    SearchDatasetsOutput,
)

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _make_client(cfg: Optional[DataFairConfig] = None) -> DataFairClient:
    """Create a DataFairClient, from environment variables unless given a config.

    Tests replace this with a lambda returning a fake client.
    """
    cfg = cfg or DataFairConfig.from_env()
    return DataFairClient(config=cfg)


class AggregationMetric(BaseModel):
    """Metric computed inside each aggregation bucket."""

    column: str = Field(description="Key of the numeric column the metric is computed on")
    metric: Literal["sum", "avg", "min", "max"] = Field(
        description="Metric to compute: sum, avg, min or max"
    )


# ---------------------------------------------------------------------------
# Core async tasks (library-style)
# ---------------------------------------------------------------------------


async def search_datasets(
    query: str,
    client: Optional[DataFairClient] = None,
) -> Dict[str, Any]:
    query = (query or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise ValueError(
            f"Search term must be at least {MIN_QUERY_LENGTH} characters long."
        )

    client = client or _make_client()
    page = await client.list_datasets(query=query)

    return {
        "count": page.count,
        "datasets": [d.to_dict() for d in page.datasets],
    }


async def describe_dataset(
    dataset_id: str,
    client: Optional[DataFairClient] = None,
) -> Dict[str, Any]:
    client = client or _make_client()
    detail = await client.describe_dataset(dataset_id)
    return detail.to_dict()


async def search_data(
    dataset_id: str,
    query: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
    select: Optional[str] = None,
    client: Optional[DataFairClient] = None,
) -> Dict[str, Any]:
    # Reject malformed filters before a client (and a connection) exists.
    validated = validate_filters(filters)

    client = client or _make_client()
    result = await client.search_lines(
        dataset_id,
        query=query or None,
        filters=validated,
        select=select,
    )
    return result.to_dict()


async def aggregate_data(
    dataset_id: str,
    aggregation_columns: List[str],
    aggregation: Optional[AggregationMetric] = None,
    client: Optional[DataFairClient] = None,
) -> Dict[str, Any]:
    metric = aggregation.metric if aggregation is not None else None
    metric_column = aggregation.column if aggregation is not None else None
    columns = validate_aggregation(aggregation_columns, metric, metric_column)

    client = client or _make_client()
    result = await client.aggregate(
        dataset_id,
        columns,
        metric=metric,
        metric_column=metric_column,
    )
    return result.to_dict()


# ---------------------------------------------------------------------------
# MCP registration
# ---------------------------------------------------------------------------

_READ_ONLY = ToolAnnotations(readOnlyHint=True)


def tool_result(payload: Dict[str, Any]) -> CallToolResult:
    """Wrap a tool payload as structured content plus its JSON text mirror."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(payload, ensure_ascii=False, indent=2))],
        structuredContent=payload,
    )


def register_tools(server: Any, config: Optional[DataFairConfig] = None) -> None:
    """Register Data Fair tools on a FastMCP server.

    Each tool answers with the same object twice: as structured content
    (checked against the declared output model) and as a JSON text block for
    older clients.
    """
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(
        name="search_datasets",
        title="Search Datasets",
        description=(
            "Full-text search for datasets in Data Fair. Uses French keywords to search across "
            "dataset titles, descriptions and metadata. Returns the top 10 datasets with their ID, "
            "title, description and a link to the dataset page that must be included in responses. "
            "Then use describe_dataset to get detailed metadata."
        ),
        annotations=_READ_ONLY,
    )
    async def mcp_search_datasets(
        query: Annotated[
            str,
            Field(
                min_length=MIN_QUERY_LENGTH,
                description=(
                    "French keywords for full-text search (simple keywords, not sentences). "
                    'Examples: "élus", "DPE", "entreprises", "logement social"'
                ),
            ),
        ],
    ) -> Annotated[CallToolResult, SearchDatasetsOutput]:
        logger.debug("search_datasets query=%r", query)
        return tool_result(await search_datasets(query, client=_make_client(config)))

    @server.tool(
        name="describe_dataset",
        title="Describe Dataset",
        description=(
            "Retrieve detailed metadata for a dataset by its ID including column schema, "
            "spatial/temporal coverage, license and 3 sample rows. Use this after search_datasets "
            "and before search_data or aggregate_data."
        ),
        annotations=_READ_ONLY,
    )
    async def mcp_describe_dataset(
        datasetId: Annotated[  # noqa: N803
            str,
            Field(description="The unique dataset ID obtained from search_datasets or provided by the user"),
        ],
    ) -> Annotated[CallToolResult, DescribeDatasetOutput]:
        logger.debug("describe_dataset datasetId=%r", datasetId)
        return tool_result(await describe_dataset(datasetId, client=_make_client(config)))

    @server.tool(
        name="search_data",
        title="Search data from a dataset",
        description=(
            "Search for data rows in a specific dataset using either:\n"
            "- full-text search across all columns (query) for quick, broad matches\n"
            "- precise filters (filters) for exact conditions, comparisons or column-specific searches.\n"
            "Returns the top 10 matching rows with relevance scores (_score), the total count and a "
            "filtered view link. Always include the filtered view link, the dataset link and the "
            "license when presenting results. Use describe_dataset first to learn the column keys."
        ),
        annotations=_READ_ONLY,
    )
    async def mcp_search_data(
        datasetId: Annotated[  # noqa: N803
            str,
            Field(description="The unique dataset ID obtained from search_datasets or provided by the user"),
        ],
        query: Annotated[
            Optional[str],
            Field(
                description=(
                    "French keywords for full-text search across all columns (simple keywords, not "
                    'sentences). Do not combine with filters. Examples: "Jean Dupont", "Paris", "2025"'
                ),
            ),
        ] = None,
        filters: Annotated[
            Optional[Dict[str, str]],
            Field(
                description=(
                    "Precise filters on specific columns. Each key is column_key + suffix: _eq (equal, "
                    "case-sensitive), _search (full-text within the column), _in (comma-separated list "
                    "of values), _gte, _gt, _lte, _lt (comparisons), _exists, _nexists (value present or "
                    'absent). Example: { "nom_search": "Jean", "age_lte": "30", "ville_eq": "Paris" }'
                ),
            ),
        ] = None,
        select: Annotated[
            Optional[str],
            Field(
                description=(
                    "Comma-separated list of column keys to include in the results, without spaces. "
                    'Example: "nom,age,ville"'
                ),
            ),
        ] = None,
    ) -> Annotated[CallToolResult, SearchDataOutput]:
        logger.debug(
            "search_data datasetId=%r query=%r filters=%r select=%r",
            datasetId,
            query,
            filters,
            select,
        )
        result = await search_data(
            datasetId,
            query=query,
            filters=filters,
            select=select,
            client=_make_client(config),
        )
        return tool_result(result)

    @server.tool(
        name="aggregate_data",
        title="Aggregate data from a dataset",
        description=(
            f"Group the rows of a dataset on 1 to {MAX_AGGREGATION_COLUMNS} columns and count them, "
            "optionally computing a metric (sum, avg, min, max) on another column inside each group. "
            "Returns a tree of groups: one level per aggregation column."
        ),
        annotations=_READ_ONLY,
    )
    async def mcp_aggregate_data(
        datasetId: Annotated[  # noqa: N803
            str,
            Field(description="The unique dataset ID obtained from search_datasets or provided by the user"),
        ],
        aggregationColumn: Annotated[  # noqa: N803
            List[str],
            Field(
                min_length=1,
                max_length=MAX_AGGREGATION_COLUMNS,
                description=(
                    f"Column keys to group by, outermost first (at most {MAX_AGGREGATION_COLUMNS})"
                ),
            ),
        ],
        aggregation: Annotated[
            Optional[AggregationMetric],
            Field(description="Optional metric computed in each group"),
        ] = None,
    ) -> Annotated[CallToolResult, AggregateDataOutput]:
        logger.debug(
            "aggregate_data datasetId=%r columns=%r aggregation=%r",
            datasetId,
            aggregationColumn,
            aggregation,
        )
        result = await aggregate_data(
            datasetId,
            aggregationColumn,
            aggregation=aggregation,
            client=_make_client(config),
        )
        return tool_result(result)
