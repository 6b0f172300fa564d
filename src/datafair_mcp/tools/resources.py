# Data Fair MCP Server
# File: tools/resources.py
# Version: v1

"""Read-only MCP resources describing the Data Fair catalog."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from ..client import DataFairClient
from ..config import DataFairConfig
from ..models import Column, DatasetDetail
from . import tasks

logger = logging.getLogger(__name__)

RESOURCE_PREFIX = "data-fair://datasets"


def column_information(col: Column) -> str:
    """Plain-text card for one column."""
    lines = [f"key: {col.key}"]
    if col.original_name and col.original_name != col.key:
        lines.append(f"original name (column name in the original file): {col.original_name}")
    if col.title:
        lines.append(f"title: {col.title}")
    lines.append(f"type: {col.format or col.type}")
    if col.enum:
        lines.append("possible values: " + ", ".join(str(v) for v in col.enum))
    if col.labels:
        lines.append(
            "value labels: " + ", ".join(f"{k}={v}" for k, v in col.labels.items())
        )
    return "\n".join(lines)


def dataset_information(detail: DatasetDetail) -> str:
    """Markdown document describing a dataset and each of its columns."""
    parts: List[str] = [f"# {detail.title}"]
    if detail.description:
        parts.append(detail.description)

    for col in detail.schema:
        section = f"## Column {col.display_name}\n\n{column_information(col)}"
        if col.description:
            section += f"\n\n{col.description}"
        parts.append(section)

    return "\n\n".join(parts) + "\n"


async def list_datasets(client: Optional[DataFairClient] = None) -> List[Dict[str, Any]]:
    client = client or tasks._make_client()
    page = await client.list_datasets(select=("id", "title", "description"))

    return [
        {
            "name": d.title,
            "uri": f"{RESOURCE_PREFIX}/{d.id}",
            "description": d.description,
            "origin": f"{client.config.api_url}/datasets/{d.id}",
        }
        for d in page.datasets
    ]


async def get_information(
    dataset_id: str,
    client: Optional[DataFairClient] = None,
) -> str:
    client = client or tasks._make_client()
    detail = await client.get_dataset(dataset_id)
    return dataset_information(detail)


def register_resources(server: Any, config: Optional[DataFairConfig] = None) -> None:
    """Register the catalog listing and the per-dataset information resources."""

    @server.resource(
        RESOURCE_PREFIX,
        name="list_datasets",
        title="List Available Datasets",
        description=(
            "Lists datasets available in the Data Fair instance with their names, URIs and "
            "descriptions, for discovery and selection."
        ),
        mime_type="application/json",
    )
    async def mcp_list_datasets() -> str:
        logger.debug("Reading resource list_datasets")
        items = await list_datasets(client=tasks._make_client(config))
        return json.dumps(items, ensure_ascii=False)

    @server.resource(
        RESOURCE_PREFIX + "/{datasetId}",
        name="get_information",
        title="Dataset Information",
        description="Description and column information of one specific dataset.",
        mime_type="text/markdown",
    )
    async def mcp_get_information(datasetId: str) -> str:  # noqa: N803
        logger.debug("Reading resource get_information datasetId=%r", datasetId)
        return await get_information(datasetId, client=tasks._make_client(config))
