"""JSON output writer -- produces index.json and details/{safeName}.json."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from pydantic import SerializeAsAny, TypeAdapter

from mcp_dock_sync.config import DETAILS_DIR, INDEX_FILE
from mcp_dock_sync.output.models import OutputModel

# Entries are dumped with their own subclass fields and serializer.
_INDEX_ADAPTER = TypeAdapter(list[SerializeAsAny[OutputModel]])


def safe_filename(name: str) -> str:
    """'io.github.user/weather' -> 'io.github.user__weather'."""
    return name.replace("/", "__")


def details_dir(root: Path) -> Path:
    return root / DETAILS_DIR


def prepare_dirs(root: Path) -> None:
    """Create the output tree. Failure here is fatal."""
    details_dir(root).mkdir(parents=True, exist_ok=True)


def purge_details(root: Path) -> int:
    """Delete every file in the details directory; return how many were removed."""
    removed = 0
    for path in details_dir(root).iterdir():
        if path.is_file():
            path.unlink()
            removed += 1
    print(f"  Cleaned {removed} old detail files")
    return removed


def write_index(root: Path, entries: Sequence[OutputModel]) -> Path:
    path = root / INDEX_FILE
    with open(path, "wb") as f:
        f.write(_INDEX_ADAPTER.dump_json(list(entries), indent=2, by_alias=True))
    print(f"Saved {INDEX_FILE} with {len(entries)} entries")
    return path


def write_detail(root: Path, name: str, record: OutputModel) -> Path:
    path = details_dir(root) / f"{safe_filename(name)}.json"
    _write_json(path, record)
    return path


def _write_json(path: Path, model: OutputModel) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(model.model_dump_json(indent=2, by_alias=True))
