"""Pipeline orchestrator -- collect → dedupe → filter → enrich → rank → publish.

The same control flow serves every source; an adapter supplies the fetch and
projection logic and switches the optional stages on or off. Everything runs
sequentially: the fixed delays between requests are the rate limit.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from pathlib import Path

import httpx

from mcp_dock_sync import config
from mcp_dock_sync.collectors.base import SourceAdapter
from mcp_dock_sync.enrichers.github import GitHubStarEnricher, StarCache
from mcp_dock_sync.output.writer import (
    prepare_dirs,
    purge_details,
    write_detail,
    write_index,
)
from mcp_dock_sync.stages.dedupe import deduplicate
from mcp_dock_sync.stages.installable import filter_installable, print_filter_stats
from mcp_dock_sync.stages.ranking import rank_by_stars


@dataclass
class SyncReport:
    fetched: int = 0
    unique: int = 0
    published: int = 0
    details_written: int = 0
    details_failed: int = 0


def _banner(title: str) -> None:
    print()
    print("=" * 60)
    print(title)
    print("=" * 60)


async def run(
    adapter: SourceAdapter,
    output_root: str | Path | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    star_cache: StarCache | None = None,
    github_delay: float = config.GITHUB_FETCH_DELAY,
) -> SyncReport:
    """Run one source end to end and write its JSON tree.

    Raises on fatal errors (failed list page, unwritable output directory);
    per-server failures are counted in the returned report instead.
    """
    t0 = time.monotonic()
    root = Path(output_root or config.OUTPUT_DIR)
    if adapter.output_subdir:
        root = root / adapter.output_subdir
    report = SyncReport()

    print(f"Starting {adapter.name} sync into {root}/")
    prepare_dirs(root)

    async with httpx.AsyncClient(
        timeout=config.HTTP_TIMEOUT,
        headers=adapter.headers,
        transport=transport,
    ) as client:
        # Stage 1: Collect
        _banner("STAGE 1: COLLECT")
        fetched = await adapter.fetch(client)
        report.fetched = len(fetched)

        records = deduplicate(
            fetched, adapter.key, adapter.is_latest, adapter.published_at
        )
        report.unique = len(records)
        print(
            f"After deduplication: {len(records)} unique servers "
            f"(from {len(fetched)} total)"
        )

        if adapter.filter_installable:
            records, stats = filter_installable(records)
            print_filter_stats(stats)

        # Stage 2: Enrich
        stars: dict[str, int] = {}
        if adapter.enrich_stars:
            _banner("STAGE 2: ENRICH")
            enricher = GitHubStarEnricher(
                star_cache if star_cache is not None else StarCache(),
                token=config.github_token(),
                delay=github_delay,
            )
            stars = await enricher.enrich(
                client,
                [(adapter.key(r), adapter.repository_url(r)) for r in records],
            )

        if adapter.rank_by_stars:
            records = rank_by_stars(records, stars, adapter.key)

        # Stage 3: Publish
        _banner("STAGE 3: PUBLISH")
        if adapter.purge_details:
            purge_details(root)

        index = [adapter.to_index_entry(r, stars.get(adapter.key(r), 0)) for r in records]
        write_index(root, index)
        report.published = len(index)

        if adapter.rank_by_stars:
            _print_top(records, stars, adapter)

        print("Saving server details...")
        total = len(records)
        for i, record in enumerate(records, start=1):
            name = adapter.key(record)
            try:
                detail = await adapter.detail(client, record, stars.get(name, 0))
                if detail is None:
                    print(f"  [{i}/{total}] {name}... FAILED")
                    report.details_failed += 1
                    continue
                write_detail(root, name, detail)
            except (OSError, ValueError) as exc:
                print(f"  [{i}/{total}] {name}... FAILED: {exc}", file=sys.stderr)
                report.details_failed += 1
                continue
            print(f"  [{i}/{total}] {name}... ok")
            report.details_written += 1

    elapsed = time.monotonic() - t0
    print()
    print(f"Sync of {adapter.name} complete in {elapsed:.1f}s")
    print(f"  Success: {report.details_written}")
    print(f"  Failed: {report.details_failed}")
    print(f"  Total files: {report.details_written + 1} (index + details)")
    return report


def _print_top(records: list, stars: dict[str, int], adapter: SourceAdapter) -> None:
    print(f"Top {config.TOP_N_REPORT} by GitHub stars:")
    for i, record in enumerate(records[: config.TOP_N_REPORT], start=1):
        name = adapter.key(record)
        print(f"  {i}. {name} - {stars.get(name, 0)} stars")
