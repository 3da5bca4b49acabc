"""Source adapter interface shared by the registry collectors.

An adapter knows how to fetch one upstream registry, how to identify and
version its records, and how to project a record into the published index
and detail shapes. It also declares which optional pipeline stages apply.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any, ClassVar, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from mcp_dock_sync.collectors.models import EPOCH
from mcp_dock_sync.output.models import OutputModel

R = TypeVar("R", bound=BaseModel)


def parse_records(raw: Iterable[Any], model: type[R]) -> list[R]:
    """Validate raw records, skipping (and reporting) malformed ones."""
    records: list[R] = []
    skipped = 0
    for i, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            skipped += 1
            print(
                f"  Skipping malformed record at index {i}: "
                f"{exc.error_count()} validation error(s)",
                file=sys.stderr,
            )
    if skipped:
        print(f"  Skipped {skipped} malformed records", file=sys.stderr)
    return records


class SourceAdapter(ABC, Generic[R]):
    """One upstream registry plugged into the generic pipeline."""

    name: ClassVar[str]
    # Relative to the output root; "" writes directly into the root.
    output_subdir: ClassVar[str] = ""
    headers: ClassVar[dict[str, str]] = {}

    # Optional stages.
    filter_installable: ClassVar[bool] = False
    enrich_stars: ClassVar[bool] = False
    rank_by_stars: ClassVar[bool] = False
    purge_details: ClassVar[bool] = False

    @abstractmethod
    async def fetch(self, client: httpx.AsyncClient) -> list[R]:
        """Fetch and validate the complete upstream listing."""

    @abstractmethod
    def key(self, record: R) -> str:
        """Server name; doubles as the dedupe key and the detail file stem."""

    def is_latest(self, record: R) -> bool:
        return False

    def published_at(self, record: R) -> datetime:
        return EPOCH

    def repository_url(self, record: R) -> str | None:
        return None

    @abstractmethod
    def to_index_entry(self, record: R, stars: int) -> OutputModel:
        ...

    @abstractmethod
    async def detail(
        self, client: httpx.AsyncClient, record: R, stars: int
    ) -> OutputModel | None:
        """Build the detail record; None means it could not be obtained."""
