"""Paginated list fetching for registry APIs.

Two pagination styles are supported:

* cursor -- follow ``metadata.nextCursor`` until it is absent (official registry)
* numbered -- ``page=N&pageSize=M`` until a short or empty page (Smithery)

Any non-2xx page aborts the whole run via ``raise_for_status``; an incomplete
snapshot is worse than none.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx


async def fetch_cursor_pages(
    client: httpx.AsyncClient,
    url: str,
    delay: float,
) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    cursor: str | None = None
    page = 0

    while True:
        page += 1
        params = {"cursor": cursor} if cursor else None
        print(f"  Fetching page {page}...")

        resp = await client.get(url, params=params)
        resp.raise_for_status()
        data = resp.json()

        servers_raw: list[dict[str, Any]] = data.get("servers") or []
        if not servers_raw:
            break
        records.extend(servers_raw)

        metadata = data.get("metadata") or {}
        cursor = metadata.get("nextCursor")
        if not cursor:
            break

        await asyncio.sleep(delay)

    print(f"  Fetched {len(records)} records in {page} page(s)")
    return records


async def fetch_numbered_pages(
    client: httpx.AsyncClient,
    url: str,
    page_size: int,
    delay: float,
) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    page = 1

    while True:
        print(f"  Fetching page {page}...")

        resp = await client.get(url, params={"page": page, "pageSize": page_size})
        resp.raise_for_status()
        data = resp.json()

        # Either {"servers": [...]} or a bare array.
        servers_raw = data.get("servers", data) if isinstance(data, dict) else data
        if not isinstance(servers_raw, list) or not servers_raw:
            break
        records.extend(servers_raw)

        if len(servers_raw) < page_size:
            break

        page += 1
        await asyncio.sleep(delay)

    print(f"  Fetched {len(records)} records in {page} page(s)")
    return records
