# Data Fair MCP Server
# File: query.py
# Version: v1

"""Query-string building and response mapping for the Data Fair API.

Everything here is pure: no I/O, so every check runs before the client
issues a request.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

from .models import AggregationBucket, AggregationResult

# Column filter suffixes understood by the ``/lines`` endpoint.
FILTER_SUFFIXES = (
    "eq",
    "search",
    "in",
    "gte",
    "gt",
    "lte",
    "lt",
    "exists",
    "nexists",
)
FILTER_KEY_PATTERN = re.compile(r"^(.+)_(" + "|".join(FILTER_SUFFIXES) + r")$")

DATASETS_PAGE_SIZE = 10
LINES_PAGE_SIZE = 10
SAMPLE_LINES_SIZE = 3

MAX_AGGREGATION_COLUMNS = 3
# One tree level per grouping column.
MAX_AGGREGATION_DEPTH = MAX_AGGREGATION_COLUMNS
AGGREGATION_METRICS = ("sum", "avg", "min", "max")
AGGREGATION_BUCKETS = 20
MISSING_VALUE_LABEL = "Données manquantes"

QueryParams = List[Tuple[str, str]]


class InvalidFilterError(ValueError):
    """A column filter key does not follow ``<column>_<suffix>``."""


class InvalidAggregationError(ValueError):
    """An aggregation request exceeds the supported bounds."""


def parse_filter_key(key: str) -> Tuple[str, str]:
    """Split a filter key into ``(column, suffix)``.

    >>> parse_filter_key("age_gte")
    ('age', 'gte')
    """
    match = FILTER_KEY_PATTERN.match(key)
    if match is None:
        raise InvalidFilterError(
            f"Invalid filter key '{key}'. Filter keys must follow the pattern "
            "column_key + suffix, with suffix one of: "
            + ", ".join(f"_{s}" for s in FILTER_SUFFIXES)
            + "."
        )
    return match.group(1), match.group(2)


def validate_filters(filters: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Check every filter key and stringify values.

    Raises InvalidFilterError on the first malformed key.
    """
    if not filters:
        return {}

    validated: Dict[str, str] = {}
    for key, value in filters.items():
        parse_filter_key(str(key))
        if isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        elif isinstance(value, bool):
            value = "true" if value else "false"
        validated[str(key)] = str(value)
    return validated


def normalize_select(select: Union[str, Iterable[str], None]) -> Optional[str]:
    """Render a column selection as ``a,b,c`` (no spaces)."""
    if select is None:
        return None
    if isinstance(select, str):
        items = select.split(",")
    else:
        items = list(select)
    cleaned = [str(item).strip() for item in items if str(item).strip()]
    return ",".join(cleaned) or None


def build_datasets_params(
    query: Optional[str] = None,
    select: Union[str, Iterable[str], None] = None,
    size: int = DATASETS_PAGE_SIZE,
) -> QueryParams:
    params: QueryParams = []
    if query:
        params.append(("q", query))
    params.append(("size", str(int(size))))
    selected = normalize_select(select)
    if selected:
        params.append(("select", selected))
    return params


def build_lines_params(
    query: Optional[str] = None,
    filters: Optional[Mapping[str, Any]] = None,
    select: Union[str, Iterable[str], None] = None,
) -> QueryParams:
    """Build the parameters shared by the ``/lines`` call and the table view.

    Page size is not included: the table view has its own pagination.
    """
    validated = validate_filters(filters)

    params: QueryParams = []
    if query:
        params.append(("q", query))
        params.append(("q_mode", "complete"))
    selected = normalize_select(select)
    if selected:
        params.append(("select", selected))
    params.extend(validated.items())
    return params


def with_url_params(url: str, params: QueryParams) -> str:
    if not params:
        return url
    return f"{url}?{urlencode(params)}"


def validate_aggregation(
    columns: Union[str, Sequence[str], None],
    metric: Optional[str] = None,
    metric_column: Optional[str] = None,
) -> List[str]:
    """Check grouping columns and metric; return the cleaned column list."""
    if isinstance(columns, str):
        columns = [columns]
    cleaned = [str(c).strip() for c in (columns or []) if str(c).strip()]

    if not cleaned:
        raise InvalidAggregationError("At least one aggregation column is required.")
    if len(cleaned) > MAX_AGGREGATION_COLUMNS:
        raise InvalidAggregationError(
            f"At most {MAX_AGGREGATION_COLUMNS} aggregation columns are supported, "
            f"got {len(cleaned)}."
        )

    if metric is not None or metric_column is not None:
        if metric not in AGGREGATION_METRICS:
            raise InvalidAggregationError(
                f"Unknown metric '{metric}', expected one of: "
                f"{', '.join(AGGREGATION_METRICS)}."
            )
        if not metric_column:
            raise InvalidAggregationError(
                f"Metric '{metric}' requires a column to compute it on."
            )

    return cleaned


def build_aggregation_params(
    columns: Sequence[str],
    metric: Optional[str] = None,
    metric_column: Optional[str] = None,
) -> QueryParams:
    cleaned = validate_aggregation(columns, metric, metric_column)

    params: QueryParams = [
        ("field", ";".join(cleaned)),
        ("agg_size", str(AGGREGATION_BUCKETS)),
        ("size", "0"),
        ("missing", MISSING_VALUE_LABEL),
    ]
    if metric:
        params.append(("metric", metric))
        params.append(("metric_field", str(metric_column)))
    return params


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _map_bucket(raw: Mapping[str, Any], depth: int) -> AggregationBucket:
    bucket = AggregationBucket(
        value=raw.get("value"),
        total=_as_int(raw.get("total")),
        total_values=_as_int(raw.get("total_values")),
        total_other=_as_int(raw.get("total_other")),
        metric=raw.get("metric"),
    )
    nested = raw.get("aggs")
    if depth < MAX_AGGREGATION_DEPTH and isinstance(nested, list):
        bucket.aggs = [_map_bucket(b, depth + 1) for b in nested if isinstance(b, dict)]
    return bucket


def map_aggregation(dataset_id: str, payload: Mapping[str, Any]) -> AggregationResult:
    """Map a ``values_agg`` payload into an aggregation tree.

    Root buckets are level 1; nesting stops at MAX_AGGREGATION_DEPTH
    whatever upstream returns.
    """
    aggs = payload.get("aggs")
    return AggregationResult(
        dataset_id=dataset_id,
        total=_as_int(payload.get("total")),
        total_values=_as_int(payload.get("total_values")),
        total_other=_as_int(payload.get("total_other")),
        aggs=[_map_bucket(b, 1) for b in aggs if isinstance(b, dict)]
        if isinstance(aggs, list)
        else [],
    )
