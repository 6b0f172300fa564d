# Data Fair MCP Server
# File: client.py
# Version: v1
"""High-level client for the Data Fair REST API.

Implements:

- list_datasets() via ``GET /datasets``
- get_dataset() via ``GET /datasets/{id}``
- get_lines() / search_lines() via ``GET /datasets/{id}/lines``
- aggregate() via ``GET /datasets/{id}/values_agg``

Upstream failures are raised as CatalogHTTPError with the status code and
the response body untouched. Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import httpx
from httpx import HTTPStatusError, RequestError

from .config import DataFairConfig
from .models import (
    AggregationResult,
    Column,
    DatasetDetail,
    DatasetPage,
    DatasetSummary,
    License,
    LinesPage,
    LinesSearch,
)
from .query import (
    DATASETS_PAGE_SIZE,
    LINES_PAGE_SIZE,
    SAMPLE_LINES_SIZE,
    QueryParams,
    build_aggregation_params,
    build_datasets_params,
    build_lines_params,
    map_aggregation,
    with_url_params,
)

logger = logging.getLogger(__name__)

USER_AGENT = "datafair-mcp (Datasets)"


class DataFairError(RuntimeError):
    """Base class for catalog client failures."""


class CatalogHTTPError(DataFairError):
    """Data Fair answered with a non-success status."""

    def __init__(self, url: str, status_code: int, body: str) -> None:
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Data Fair request to '{url}' failed (HTTP {status_code}): {body}")


class CatalogRequestError(DataFairError):
    """The request never got an HTTP answer (DNS, connect, timeout...)."""


class CatalogResponseError(DataFairError):
    """The payload does not have the expected JSON shape."""


@dataclass
class DataFairClient:
    """Wrapper around the Data Fair datasets API."""

    config: DataFairConfig

    # Injected by tests (httpx.MockTransport); None means real network I/O.
    transport: Optional[httpx.AsyncBaseTransport] = None

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.api_url,
            timeout=float(self.config.http_timeout),
            verify=self.config.verify_tls,
            transport=self.transport,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
        )

    async def _get_json(self, path: str, params: Optional[QueryParams] = None) -> Dict[str, Any]:
        async with self._http_client() as http_client:
            url = str(http_client.build_request("GET", path, params=params or None).url)
            logger.debug("GET %s", url)
            try:
                response = await http_client.get(path, params=params or None)
            except RequestError as exc:
                raise CatalogRequestError(
                    f"Error calling Data Fair API at '{url}': {exc}"
                ) from exc

            try:
                response.raise_for_status()
            except HTTPStatusError as exc:
                logger.warning(
                    "Data Fair returned HTTP %s for %s", response.status_code, url
                )
                raise CatalogHTTPError(
                    url=url,
                    status_code=response.status_code,
                    body=response.text,
                ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise CatalogResponseError(
                f"Data Fair response from '{url}' is not valid JSON."
            ) from exc

        if not isinstance(data, dict):
            raise CatalogResponseError(
                f"Unexpected response from '{url}': "
                f"expected JSON object, got {type(data).__name__}."
            )
        return data

    # ------------------------------------------------------------------
    # Catalog: datasets
    # ------------------------------------------------------------------

    async def list_datasets(
        self,
        query: Optional[str] = None,
        select: Union[str, Iterable[str], None] = ("id", "title", "description", "page"),
        size: int = DATASETS_PAGE_SIZE,
    ) -> DatasetPage:
        """Full-text search over the catalog (or plain listing without query)."""
        params = build_datasets_params(query=query, select=select, size=size)
        data = await self._get_json("/datasets", params)

        datasets: List[DatasetSummary] = []
        raw_results = data.get("results")
        if isinstance(raw_results, list):
            for item in raw_results[:size]:
                if not isinstance(item, dict) or not item.get("id"):
                    continue

                dataset_id = str(item["id"])
                datasets.append(
                    DatasetSummary(
                        id=dataset_id,
                        title=str(item.get("title") or dataset_id),
                        description=item.get("description") or None,
                        link=item.get("page") or self.config.dataset_page_url(dataset_id),
                    )
                )

        count = data.get("count")
        return DatasetPage(
            count=int(count) if isinstance(count, int) else len(datasets),
            datasets=datasets,
        )

    async def get_dataset(self, dataset_id: str) -> DatasetDetail:
        """Fetch one dataset's metadata, reserved columns removed."""
        data = await self._get_json(f"/datasets/{dataset_id}")

        schema: List[Column] = []
        raw_schema = data.get("schema")
        if isinstance(raw_schema, list):
            for raw_col in raw_schema:
                if not isinstance(raw_col, dict) or not raw_col.get("key"):
                    continue
                col = Column.from_api(raw_col)
                if not col.reserved:
                    schema.append(col)

        license_raw = data.get("license")
        license_ = None
        if isinstance(license_raw, dict) and license_raw.get("href"):
            license_ = License(
                href=str(license_raw["href"]),
                title=str(license_raw.get("title") or license_raw["href"]),
            )

        topics_raw = data.get("topics")
        topics = None
        if isinstance(topics_raw, list):
            topics = [
                str(t.get("title")) if isinstance(t, dict) else str(t)
                for t in topics_raw
                if t
            ]

        real_id = str(data.get("id") or dataset_id)
        return DatasetDetail(
            id=real_id,
            title=str(data.get("title") or real_id),
            link=data.get("page") or self.config.dataset_page_url(real_id),
            count=int(data.get("count") or 0),
            schema=schema,
            slug=data.get("slug"),
            description=data.get("description") or None,
            keywords=data.get("keywords") or None,
            origin=data.get("origin") or None,
            license=license_,
            topics=topics or None,
            spatial=data.get("spatial") or None,
            temporal=data.get("temporal") or None,
            frequency=data.get("frequency") or None,
        )

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    async def get_lines(self, dataset_id: str, params: Optional[QueryParams] = None) -> LinesPage:
        data = await self._get_json(f"/datasets/{dataset_id}/lines", params)

        raw_results = data.get("results")
        results: List[Dict[str, Any]] = []
        if isinstance(raw_results, list):
            results = [r for r in raw_results if isinstance(r, dict)]

        total = data.get("total")
        return LinesPage(
            total=int(total) if isinstance(total, int) else len(results),
            results=results,
        )

    async def describe_dataset(self, dataset_id: str) -> DatasetDetail:
        """Dataset metadata plus a few sample rows."""
        detail = await self.get_dataset(dataset_id)
        sample = await self.get_lines(dataset_id, [("size", str(SAMPLE_LINES_SIZE))])
        detail.sample_lines = sample.results[:SAMPLE_LINES_SIZE]
        return detail

    async def search_lines(
        self,
        dataset_id: str,
        query: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
        select: Union[str, Iterable[str], None] = None,
    ) -> LinesSearch:
        """Full-text search or column filtering over the rows of a dataset.

        Filter keys are validated before anything is sent upstream.
        """
        params = build_lines_params(query=query, filters=filters, select=select)
        view_url = with_url_params(self.config.table_view_url(dataset_id), params)

        page = await self.get_lines(dataset_id, params + [("size", str(LINES_PAGE_SIZE))])

        return LinesSearch(
            dataset_id=dataset_id,
            count=page.total,
            filtered_view_url=view_url,
            lines=page.results[:LINES_PAGE_SIZE],
        )

    async def aggregate(
        self,
        dataset_id: str,
        columns: Sequence[str],
        metric: Optional[str] = None,
        metric_column: Optional[str] = None,
    ) -> AggregationResult:
        """Group rows on up to three columns, optionally computing a metric."""
        params = build_aggregation_params(columns, metric=metric, metric_column=metric_column)
        data = await self._get_json(f"/datasets/{dataset_id}/values_agg", params)
        return map_aggregation(dataset_id, data)
