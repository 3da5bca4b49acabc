"""Installability filter for official registry entries.

A server is kept only if at least one of its packages has a supported
registry type. Remote-only servers are dropped even though the schema
supports them: remote endpoints are too often offline to recommend.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from mcp_dock_sync.collectors.models import OfficialEntry
from mcp_dock_sync.config import SUPPORTED_REGISTRY_TYPES


class Installability(str, Enum):
    INSTALLABLE = "installable"
    NO_PACKAGES = "no_packages"
    ONLY_REMOTES = "only_remotes"
    UNSUPPORTED_REGISTRY_TYPE = "unsupported_registry_type"


@dataclass
class FilterStats:
    total: int = 0
    installable: int = 0
    rejected: Counter[Installability] = field(default_factory=Counter)
    registry_types: Counter[str] = field(default_factory=Counter)


def classify(entry: OfficialEntry) -> Installability:
    packages = entry.server.packages
    if any(pkg.registry_type in SUPPORTED_REGISTRY_TYPES for pkg in packages):
        return Installability.INSTALLABLE
    if not packages:
        if entry.server.remotes:
            return Installability.ONLY_REMOTES
        return Installability.NO_PACKAGES
    return Installability.UNSUPPORTED_REGISTRY_TYPE


def filter_installable(
    entries: Iterable[OfficialEntry],
) -> tuple[list[OfficialEntry], FilterStats]:
    stats = FilterStats()
    kept: list[OfficialEntry] = []

    for entry in entries:
        stats.total += 1
        for pkg in entry.server.packages:
            stats.registry_types[pkg.registry_type or "unknown"] += 1

        verdict = classify(entry)
        if verdict is Installability.INSTALLABLE:
            stats.installable += 1
            kept.append(entry)
        else:
            stats.rejected[verdict] += 1

    return kept, stats


def print_filter_stats(stats: FilterStats) -> None:
    print("Filter statistics:")
    print(f"  Total servers: {stats.total}")
    print(f"  Installable: {stats.installable}")
    print("  Filtered out:")
    print(f"    - No packages: {stats.rejected[Installability.NO_PACKAGES]}")
    print(
        "    - Only remotes (not supported): "
        f"{stats.rejected[Installability.ONLY_REMOTES]}"
    )
    print(
        "    - Unsupported registry type: "
        f"{stats.rejected[Installability.UNSUPPORTED_REGISTRY_TYPE]}"
    )
    print("  Registry types found:")
    for reg_type, count in stats.registry_types.most_common():
        marker = "supported" if reg_type in SUPPORTED_REGISTRY_TYPES else "unsupported"
        print(f"    - {reg_type}: {count} ({marker})")
