"""Order records by enrichment score."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TypeVar

T = TypeVar("T")


def rank_by_stars(
    records: Iterable[T],
    stars: Mapping[str, int],
    key: Callable[[T], str],
) -> list[T]:
    """Stable sort, most stars first. Ties keep their incoming order."""
    return sorted(records, key=lambda r: stars.get(key(r), 0), reverse=True)
