"""Collapse multiple versions of a server down to one record per name."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TypeVar

T = TypeVar("T")


def deduplicate(
    records: Iterable[T],
    key: Callable[[T], str],
    is_latest: Callable[[T], bool],
    published_at: Callable[[T], datetime],
) -> list[T]:
    """Keep one record per key.

    A later record replaces the kept one when it is flagged latest, or
    otherwise when its publish time is strictly newer. Records with an
    empty key are dropped. Output follows first-seen order of each key.
    """
    by_name: dict[str, T] = {}

    for record in records:
        name = key(record)
        if not name:
            continue

        existing = by_name.get(name)
        if existing is None:
            by_name[name] = record
        elif is_latest(record):
            by_name[name] = record
        elif published_at(record) > published_at(existing):
            by_name[name] = record

    return list(by_name.values())
