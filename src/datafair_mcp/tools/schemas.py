# Data Fair MCP Server
# File: tools/schemas.py
# Version: v1

"""Output shapes of the MCP tools.

These models only declare the ``outputSchema`` advertised for each tool.
Payloads are built by the ``to_dict`` methods in ``datafair_mcp.models``;
optional keys are left out there rather than sent as null.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DatasetItem(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    link: str = Field(description="Link to the dataset page, to cite as source")


class SearchDatasetsOutput(BaseModel):
    count: int = Field(description="Number of datasets matching the query")
    datasets: List[DatasetItem] = Field(description="At most 10 matching datasets")


class ColumnItem(BaseModel):
    key: str
    type: str
    title: Optional[str] = None
    description: Optional[str] = None
    enum: Optional[List[Any]] = None
    labels: Optional[Dict[str, str]] = None
    concept: Optional[str] = None
    originalName: Optional[str] = None  # noqa: N815


class LicenseItem(BaseModel):
    href: str
    title: str


class DescribeDatasetOutput(BaseModel):
    id: str
    title: str
    link: str
    count: int = Field(description="Number of rows in the dataset")
    slug: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[List[str]] = None
    origin: Optional[str] = None
    license: Optional[LicenseItem] = None
    topics: Optional[List[str]] = None
    spatial: Any = None
    temporal: Any = None
    frequency: Optional[str] = None
    columns: List[ColumnItem] = Field(alias="schema", description="Columns, reserved ones excluded")
    sampleLines: Optional[List[Dict[str, Any]]] = None  # noqa: N815


class SearchDataOutput(BaseModel):
    datasetId: str  # noqa: N815
    count: int = Field(description="Number of rows matching the search")
    filteredViewUrl: str = Field(description="Table view of the dataset with the same filters")  # noqa: N815
    lines: List[Dict[str, Any]] = Field(description="At most 10 matching rows")


class AggregationBucketItem(BaseModel):
    value: Any
    total: int
    totalValues: int  # noqa: N815
    totalOther: int  # noqa: N815
    metric: Any = None
    aggregations: Optional[List["AggregationBucketItem"]] = None


class AggregateDataOutput(BaseModel):
    datasetId: str  # noqa: N815
    total: int
    totalValues: int  # noqa: N815
    totalOther: int  # noqa: N815
    aggregations: List[AggregationBucketItem]


AggregationBucketItem.model_rebuild()
