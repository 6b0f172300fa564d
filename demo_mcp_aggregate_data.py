# demo_mcp_aggregate_data.py
# Version: v1

r"""
Quick demo for the aggregate_data() MCP task.

Usage (bash):

  export DATAFAIR_URL="https://koumoul.com"
  export DATAFAIR_TEST_DATASET="<datasetId>"
  export DATAFAIR_TEST_COLUMNS="region,sexe"
  export DATAFAIR_TEST_METRIC="avg:age"            # optional, metric:column
  python demo_mcp_aggregate_data.py
"""

import asyncio
import os

from datafair_mcp.tools.tasks import AggregationMetric, aggregate_data


DATASET = os.environ.get("DATAFAIR_TEST_DATASET", "")
COLUMNS = [c for c in os.environ.get("DATAFAIR_TEST_COLUMNS", "").split(",") if c]
METRIC = os.environ.get("DATAFAIR_TEST_METRIC", "")


def _print_buckets(buckets, indent: int = 1) -> None:
    for bucket in buckets:
        metric = f" metric={bucket['metric']}" if "metric" in bucket else ""
        print(f"{'  ' * indent}{bucket['value']}: {bucket['total']} rows{metric}")
        _print_buckets(bucket.get("aggregations", []), indent + 1)


async def main() -> None:
    if not DATASET or not COLUMNS:
        print("Set DATAFAIR_TEST_DATASET and DATAFAIR_TEST_COLUMNS first.")
        return

    aggregation = None
    if METRIC:
        metric, column = METRIC.split(":", 1)
        aggregation = AggregationMetric(column=column, metric=metric)

    print("Calling MCP task: aggregate_data()")
    print(f"Dataset: {DATASET!r}")
    print(f"Columns: {COLUMNS}")
    print(f"Metric:  {METRIC or None}")
    print()

    result = await aggregate_data(DATASET, COLUMNS, aggregation=aggregation)

    print(f"Total rows: {result['total']} (other: {result['totalOther']})")
    _print_buckets(result["aggregations"])


if __name__ == "__main__":
    asyncio.run(main())
