# Data Fair MCP Server
# File: models.py
# Version: v1

"""Domain models used by the Data Fair MCP server.

Each model maps one upstream payload shape. ``from_api`` builds a model from
the raw JSON returned by Data Fair, ``to_dict`` renders the shape exposed to
MCP clients. Optional fields are only rendered when upstream provided them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Columns generated by Data Fair itself (line index, document id, random sort
# key). They carry no information for a reader of the dataset.
RESERVED_COLUMN_KEYS = frozenset({"_i", "_id", "_rand"})


def _put(out: Dict[str, Any], key: str, value: Any) -> None:
    """Set ``key`` only when ``value`` is present (not None, not empty)."""
    if value is None:
        return
    if isinstance(value, (list, dict, str)) and not value:
        return
    out[key] = value


@dataclass
class Column:
    """A column descriptor from a dataset schema."""

    key: str
    type: str
    format: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    enum: Optional[List[Any]] = None
    labels: Optional[Dict[str, str]] = None
    concept: Optional[str] = None
    original_name: Optional[str] = None

    @property
    def reserved(self) -> bool:
        return self.key in RESERVED_COLUMN_KEYS

    @property
    def display_name(self) -> str:
        return self.title or self.original_name or self.key

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Column":
        concept_raw = raw.get("x-concept")
        concept = None
        if isinstance(concept_raw, dict):
            concept = concept_raw.get("title") or concept_raw.get("id")

        labels = raw.get("x-labels")
        original_name = raw.get("x-originalName")

        return cls(
            key=str(raw.get("key")),
            type=str(raw.get("type") or "string"),
            format=raw.get("format"),
            title=raw.get("title"),
            description=raw.get("description"),
            enum=list(raw["enum"]) if raw.get("enum") else None,
            labels={str(k): str(v) for k, v in labels.items()}
            if isinstance(labels, dict)
            else None,
            concept=concept,
            original_name=str(original_name) if original_name else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"key": self.key, "type": self.type}
        _put(out, "title", self.title)
        _put(out, "description", self.description)
        _put(out, "enum", self.enum)
        _put(out, "labels", self.labels)
        _put(out, "concept", self.concept)
        if self.original_name and self.original_name != self.key:
            out["originalName"] = self.original_name
        return out


@dataclass
class DatasetSummary:
    """Short description of a dataset, as listed by the catalog."""

    id: str
    title: str
    link: str
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "title": self.title}
        _put(out, "description", self.description)
        out["link"] = self.link
        return out


@dataclass
class DatasetPage:
    """One page of catalog results plus the total match count."""

    count: int
    datasets: List[DatasetSummary]


@dataclass
class License:
    href: str
    title: str

    def to_dict(self) -> Dict[str, Any]:
        return {"href": self.href, "title": self.title}


@dataclass
class DatasetDetail:
    """Full metadata of one dataset."""

    id: str
    title: str
    link: str
    count: int
    schema: List[Column] = field(default_factory=list)
    slug: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[List[str]] = None
    origin: Optional[str] = None
    license: Optional[License] = None
    topics: Optional[List[str]] = None
    spatial: Any = None
    temporal: Any = None
    frequency: Optional[str] = None
    sample_lines: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "count": self.count,
        }
        _put(out, "slug", self.slug)
        _put(out, "description", self.description)
        _put(out, "keywords", self.keywords)
        _put(out, "origin", self.origin)
        if self.license is not None:
            out["license"] = self.license.to_dict()
        _put(out, "topics", self.topics)
        _put(out, "spatial", self.spatial)
        _put(out, "temporal", self.temporal)
        _put(out, "frequency", self.frequency)
        out["schema"] = [col.to_dict() for col in self.schema]
        if self.sample_lines is not None:
            out["sampleLines"] = self.sample_lines
        return out


@dataclass
class LinesPage:
    """Rows returned by the ``/lines`` endpoint."""

    total: int
    results: List[Dict[str, Any]]


@dataclass
class LinesSearch:
    """Rows matching a search, plus the equivalent filtered table view."""

    dataset_id: str
    count: int
    filtered_view_url: str
    lines: List[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "datasetId": self.dataset_id,
            "count": self.count,
            "filteredViewUrl": self.filtered_view_url,
            "lines": self.lines,
        }


@dataclass
class AggregationBucket:
    """One group of rows sharing a value of a grouping column."""

    value: Any
    total: int
    total_values: int = 0
    total_other: int = 0
    metric: Optional[float] = None
    aggs: List["AggregationBucket"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "value": self.value,
            "total": self.total,
            "totalValues": self.total_values,
            "totalOther": self.total_other,
        }
        if self.metric is not None:
            out["metric"] = self.metric
        if self.aggs:
            out["aggregations"] = [b.to_dict() for b in self.aggs]
        return out


@dataclass
class AggregationResult:
    """Root of an aggregation tree."""

    dataset_id: str
    total: int
    total_values: int = 0
    total_other: int = 0
    aggs: List[AggregationBucket] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "datasetId": self.dataset_id,
            "total": self.total,
            "totalValues": self.total_values,
            "totalOther": self.total_other,
            "aggregations": [b.to_dict() for b in self.aggs],
        }
