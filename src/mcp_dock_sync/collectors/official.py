"""Official MCP registry collector.

Follows the registry's cursor pagination and projects each entry into the
index and detail shapes. Only packages with a supported registry type make
it into detail files; README content is never stored.
"""

from __future__ import annotations

from datetime import datetime

import httpx

from mcp_dock_sync import config
from mcp_dock_sync.collectors.base import SourceAdapter, parse_records
from mcp_dock_sync.collectors.models import (
    Argument,
    OfficialEntry,
    Package,
    Remote,
    Repository,
)
from mcp_dock_sync.collectors.pagination import fetch_cursor_pages
from mcp_dock_sync.output.icons import select_icon_url
from mcp_dock_sync.output.models import (
    ArgumentDescriptor,
    EnvironmentVariableDescriptor,
    HeaderDescriptor,
    OfficialDetailRecord,
    OfficialIndexEntry,
    PackageDescriptor,
    RemoteDescriptor,
    RepositoryRef,
    TransportDescriptor,
)


def _repository(repo: Repository | None) -> RepositoryRef | None:
    if repo is None:
        return None
    return RepositoryRef(
        url=repo.url,
        source=repo.source or "github",
        subfolder=repo.subfolder or None,
    )


def _argument(
    arg: Argument, default_type: str, with_value_hint: bool = False
) -> ArgumentDescriptor:
    return ArgumentDescriptor(
        name=arg.name,
        description=arg.description or None,
        type=arg.type or default_type,
        is_required=arg.is_required,
        default=arg.default or None,
        value_hint=(arg.value_hint or None) if with_value_hint else None,
    )


def _package(pkg: Package) -> PackageDescriptor:
    transport_type = pkg.transport.type if pkg.transport is not None else ""
    return PackageDescriptor(
        registry_type=pkg.registry_type or "npm",
        identifier=pkg.identifier,
        version=pkg.version or None,
        runtime_hint=pkg.runtime_hint or None,
        transport=TransportDescriptor(type=transport_type or "stdio"),
        environment_variables=[
            EnvironmentVariableDescriptor(
                name=ev.name,
                description=ev.description or None,
                is_required=ev.is_required,
                is_secret=ev.is_secret,
                default=ev.default or None,
                choices=ev.choices,
            )
            for ev in pkg.environment_variables
            if ev.name
        ],
        package_arguments=[
            _argument(arg, "positional") for arg in pkg.package_arguments if arg.name
        ],
        # Extra runtime flags, e.g. docker run options for oci packages.
        runtime_arguments=[
            _argument(arg, "named", with_value_hint=True)
            for arg in pkg.runtime_arguments
            if arg.name
        ],
    )


def _remote(remote: Remote) -> RemoteDescriptor:
    return RemoteDescriptor(
        type=remote.type or "streamable-http",
        url=remote.url,
        headers=[
            HeaderDescriptor(
                name=h.name,
                description=h.description or None,
                is_required=h.is_required,
                is_secret=h.is_secret,
                default=h.default or None,
            )
            for h in remote.headers
            if h.name
        ],
    )


def to_index_entry(entry: OfficialEntry, stars: int = 0) -> OfficialIndexEntry:
    server = entry.server
    meta = entry.meta.official
    return OfficialIndexEntry(
        id=server.name,
        display_name=server.title or server.name,
        description=server.description,
        icon_url=select_icon_url(server.icons),
        version=server.version,
        status=meta.status or "active",
        published_at=meta.published_at,
        repository=_repository(server.repository),
        stars=stars,
    )


def to_detail(entry: OfficialEntry, stars: int = 0) -> OfficialDetailRecord:
    server = entry.server
    meta = entry.meta.official
    return OfficialDetailRecord(
        id=server.name,
        display_name=server.title or server.name,
        description=server.description,
        version=server.version,
        status=meta.status or "active",
        published_at=meta.published_at,
        updated_at=meta.updated_at,
        icon_url=select_icon_url(server.icons),
        website_url=server.website_url or None,
        repository=_repository(server.repository),
        packages=[
            _package(pkg)
            for pkg in server.packages
            if pkg.registry_type in config.SUPPORTED_REGISTRY_TYPES
        ],
        remotes=[_remote(r) for r in server.remotes if r.url],
        stars=stars,
    )


class OfficialRegistryAdapter(SourceAdapter[OfficialEntry]):
    name = "official"
    output_subdir = config.OFFICIAL_SUBDIR
    headers = {
        "Accept": "application/json, application/problem+json",
        "User-Agent": config.USER_AGENT,
    }

    filter_installable = True
    enrich_stars = True
    rank_by_stars = True
    purge_details = True

    def __init__(
        self,
        base_url: str | None = None,
        delay: float = config.LIST_FETCH_DELAY,
    ) -> None:
        self.base_url = (base_url or config.registry_api_base()).rstrip("/")
        self._delay = delay

    async def fetch(self, client: httpx.AsyncClient) -> list[OfficialEntry]:
        print("Fetching server list from the official registry...")
        raw = await fetch_cursor_pages(client, f"{self.base_url}/servers", self._delay)
        return parse_records(raw, OfficialEntry)

    def key(self, record: OfficialEntry) -> str:
        return record.name

    def is_latest(self, record: OfficialEntry) -> bool:
        return record.is_latest

    def published_at(self, record: OfficialEntry) -> datetime:
        return record.published_at

    def repository_url(self, record: OfficialEntry) -> str | None:
        repo = record.server.repository
        return repo.url if repo is not None else None

    def to_index_entry(self, record: OfficialEntry, stars: int) -> OfficialIndexEntry:
        return to_index_entry(record, stars)

    async def detail(
        self, client: httpx.AsyncClient, record: OfficialEntry, stars: int
    ) -> OfficialDetailRecord:
        return to_detail(record, stars)
