"""Smithery registry collector.

Lists servers with numbered pagination, then fetches each server's detail
record individually. A failed detail fetch only skips that server.

Unlike the official registry, Smithery output is never purged: detail files
of servers that disappeared upstream stay on disk until removed by hand.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx

from mcp_dock_sync import config
from mcp_dock_sync.collectors.base import SourceAdapter, parse_records
from mcp_dock_sync.collectors.models import Connection, SmitheryDetail, SmitheryServer
from mcp_dock_sync.collectors.pagination import fetch_numbered_pages
from mcp_dock_sync.output.models import (
    Capability,
    ConnectionDescriptor,
    SmitheryDetailRecord,
    SmitheryIndexEntry,
    SmitheryLinks,
)

# Same characters JavaScript's encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "!'()*"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _author(owner: Any) -> str:
    if isinstance(owner, dict):
        username = owner.get("username")
        if isinstance(username, str) and username:
            return username
    elif isinstance(owner, str) and owner:
        return owner
    return "unknown"


def _clean_config_schema(schema: dict[str, Any] | None) -> dict[str, Any]:
    """Narrow each property to type/description/default/enum."""
    if schema is None:
        return {"type": "object", "properties": {}, "required": []}

    cleaned = dict(schema)
    properties = schema.get("properties")
    if isinstance(properties, dict):
        props: dict[str, Any] = {}
        for key, value in properties.items():
            if not isinstance(value, dict):
                value = {}
            prop: dict[str, Any] = {
                "type": value.get("type") or "string",
                "description": value.get("description") or "",
            }
            if "default" in value:
                prop["default"] = value["default"]
            if isinstance(value.get("enum"), list):
                prop["enum"] = value["enum"]
            props[key] = prop
        cleaned["properties"] = props
    return cleaned


def _connection(connections: list[Connection]) -> ConnectionDescriptor | None:
    if not connections:
        return None
    chosen = next((c for c in connections if c.type == "stdio"), connections[0])
    return ConnectionDescriptor(
        type=chosen.type or "stdio",
        runtime=chosen.runtime or "node",
        config_schema=_clean_config_schema(chosen.config_schema),
    )


def to_index_entry(server: SmitheryServer) -> SmitheryIndexEntry:
    return SmitheryIndexEntry(
        id=server.key,
        display_name=server.display_name or server.name,
        description=server.description,
        author=_author(server.owner),
        icon_url=server.icon_url or server.icon or None,
        verified=server.verified,
        downloads=server.use_count,
    )


def to_detail(detail: SmitheryDetail, server_id: str = "") -> SmitheryDetailRecord:
    """Project a detail response, dropping deployment/security/bundle fields.

    ``server_id`` is the list record's name; it wins over the name in the
    detail response so the record id always matches its file name.
    """
    server_id = server_id or detail.key
    return SmitheryDetailRecord(
        id=server_id,
        display_name=detail.display_name or detail.name,
        description=detail.description,
        created_at=detail.created_at or _now_iso(),
        links=SmitheryLinks(
            homepage=detail.homepage or detail.links.homepage,
            registry=f"{config.SMITHERY_SERVER_URL}/{server_id}",
        ),
        connection=_connection(detail.connections),
        capabilities=[
            Capability(name=t.name or t.title or "Unknown", description=t.description)
            for t in detail.tools
        ],
    )


class SmitheryAdapter(SourceAdapter[SmitheryServer]):
    name = "smithery"
    output_subdir = ""
    headers = {
        "Accept": "application/json",
        "User-Agent": config.USER_AGENT,
    }

    def __init__(
        self,
        base_url: str | None = None,
        delay: float = config.LIST_FETCH_DELAY,
        detail_delay: float = config.DETAIL_FETCH_DELAY,
        page_size: int = config.SMITHERY_PAGE_SIZE,
    ) -> None:
        self.base_url = (base_url or config.smithery_api_base()).rstrip("/")
        self._delay = delay
        self._detail_delay = detail_delay
        self._page_size = page_size

    async def fetch(self, client: httpx.AsyncClient) -> list[SmitheryServer]:
        print("Fetching server list from Smithery...")
        raw = await fetch_numbered_pages(
            client, f"{self.base_url}/servers", self._page_size, self._delay
        )
        return parse_records(raw, SmitheryServer)

    def key(self, record: SmitheryServer) -> str:
        return record.key

    def to_index_entry(self, record: SmitheryServer, stars: int) -> SmitheryIndexEntry:
        return to_index_entry(record)

    async def detail(
        self, client: httpx.AsyncClient, record: SmitheryServer, stars: int
    ) -> SmitheryDetailRecord | None:
        try:
            detail = await self._fetch_detail(client, record.key)
        finally:
            await asyncio.sleep(self._detail_delay)
        if detail is None:
            return None
        return to_detail(detail, server_id=record.key)

    async def _fetch_detail(
        self, client: httpx.AsyncClient, qualified_name: str
    ) -> SmitheryDetail | None:
        url = f"{self.base_url}/servers/{quote(qualified_name, safe=_URI_COMPONENT_SAFE)}"
        try:
            resp = await client.get(url)
        except httpx.HTTPError as exc:
            print(
                f"  Failed to fetch detail for {qualified_name}: {exc}",
                file=sys.stderr,
            )
            return None
        if not resp.is_success:
            print(
                f"  Failed to fetch detail for {qualified_name}: {resp.status_code}",
                file=sys.stderr,
            )
            return None
        try:
            return SmitheryDetail.model_validate(resp.json())
        except ValueError as exc:
            print(
                f"  Malformed detail for {qualified_name}: {exc}",
                file=sys.stderr,
            )
            return None
