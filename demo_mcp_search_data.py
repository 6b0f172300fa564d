# demo_mcp_search_data.py
# Version: v1

r"""
Quick demo for the search_datasets() and search_data() MCP tasks.

Usage (bash):

  export DATAFAIR_URL="https://koumoul.com"
  export DATAFAIR_TEST_SEARCH="gendarmerie"
  export DATAFAIR_TEST_FILTERS="code_postal_eq=56000"   # optional, comma-separated
  python demo_mcp_search_data.py
"""

import asyncio
import os
from typing import Dict

from datafair_mcp.tools.tasks import search_data, search_datasets


QUERY = os.environ.get("DATAFAIR_TEST_SEARCH", "gendarmerie")
RAW_FILTERS = os.environ.get("DATAFAIR_TEST_FILTERS", "")


def _parse_filters(raw: str) -> Dict[str, str]:
    filters: Dict[str, str] = {}
    for item in raw.split(","):
        if "=" in item:
            key, value = item.split("=", 1)
            filters[key.strip()] = value.strip()
    return filters


async def main() -> None:
    print("Calling MCP task: search_datasets()")
    print(f"Query: {QUERY!r}")
    print()

    found = await search_datasets(QUERY)
    print(f"Datasets matching: {found['count']}")
    for ds in found["datasets"]:
        print(f"  - {ds['id']}: {ds['title']} ({ds['link']})")
    print()

    if not found["datasets"]:
        print("No dataset found, nothing to search in.")
        return

    dataset_id = found["datasets"][0]["id"]
    filters = _parse_filters(RAW_FILTERS)

    print(f"Calling MCP task: search_data() on {dataset_id!r}")
    print(f"Filters: {filters or None}")
    print()

    result = await search_data(dataset_id, query=None if filters else QUERY, filters=filters or None)

    print("Rows matching:", result["count"])
    print("Filtered view:", result["filteredViewUrl"])
    for i, line in enumerate(result["lines"], start=1):
        print(f"  Row {i}: {line}")


if __name__ == "__main__":
    asyncio.run(main())
