"""Icon selection shared by index and detail projections."""

from __future__ import annotations

from collections.abc import Sequence

from mcp_dock_sync.collectors.models import Icon


def select_icon_url(icons: Sequence[Icon]) -> str | None:
    """Pick one icon URL: light theme, then unthemed, then any with a src."""
    light = next((icon for icon in icons if icon.theme == "light"), None)
    if light is not None and light.src:
        return light.src

    unthemed = next((icon for icon in icons if not icon.theme), None)
    if unthemed is not None and unthemed.src:
        return unthemed.src

    first = next((icon for icon in icons if icon.src), None)
    return first.src if first is not None else None
