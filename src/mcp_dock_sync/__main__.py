"""CLI entrypoint -- python -m mcp_dock_sync."""

from __future__ import annotations

import argparse
import asyncio
import sys

SOURCES = ("smithery", "official")


def _make_adapter(source: str):
    if source == "smithery":
        from mcp_dock_sync.collectors.smithery import SmitheryAdapter

        return SmitheryAdapter()
    from mcp_dock_sync.collectors.official import OfficialRegistryAdapter

    return OfficialRegistryAdapter()


def _sync(sources: list[str], output: str | None) -> None:
    import httpx

    from mcp_dock_sync.pipeline import run

    try:
        for source in sources:
            asyncio.run(run(_make_adapter(source), output))
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(1)
    except (httpx.HTTPError, OSError) as exc:
        print(f"Sync failed: {exc}", file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="mcp-dock-sync",
        description="Mirror MCP server registries into static JSON",
    )
    parser.add_argument(
        "source",
        choices=(*SOURCES, "all"),
        help="Registry to sync",
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output root directory (default: ./registry)",
    )
    args = parser.parse_args(argv)

    sources = list(SOURCES) if args.source == "all" else [args.source]
    _sync(sources, args.output)


def main_smithery() -> None:
    _sync(["smithery"], None)


def main_official() -> None:
    _sync(["official"], None)


if __name__ == "__main__":
    main()
