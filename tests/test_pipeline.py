"""End-to-end pipeline tests against faked upstream APIs."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from urllib.parse import unquote

import httpx
import pytest

from mcp_dock_sync.collectors.official import OfficialRegistryAdapter
from mcp_dock_sync.collectors.smithery import SmitheryAdapter
from mcp_dock_sync.enrichers.github import StarCache
from mcp_dock_sync.pipeline import run

FIXTURES = Path(__file__).parent / "fixtures"

REGISTRY_BASE = "https://registry.test/v0.1"
SMITHERY_BASE = "https://smithery.test"


def _official_entry(name: str, repo: str, published_at: str, latest: bool) -> dict:
    return {
        "server": {
            "name": name,
            "description": f"{name} server",
            "version": "1.0.0",
            "repository": {"url": repo, "source": "github"},
            "packages": [{"registryType": "npm", "identifier": name.split("/")[-1]}],
        },
        "_meta": {
            "io.modelcontextprotocol.registry/official": {
                "status": "active",
                "publishedAt": published_at,
                "isLatest": latest,
            }
        },
    }


THREE_RECORDS = [
    # Newer but not flagged latest; its repository has more stars.
    _official_entry(
        "io.github.alpha/weather",
        "https://github.com/alpha/weather-legacy",
        "2025-05-01T00:00:00Z",
        latest=False,
    ),
    _official_entry(
        "io.github.alpha/weather",
        "https://github.com/alpha/weather",
        "2025-01-01T00:00:00Z",
        latest=True,
    ),
    _official_entry(
        "io.github.beta/notes",
        "https://github.com/beta/notes",
        "2025-02-01T00:00:00Z",
        latest=True,
    ),
]

STARS = {"alpha/weather": 10, "alpha/weather-legacy": 500, "beta/notes": 50}


class FakeUpstream:
    """Serves registry pages and GitHub repos from memory, recording requests."""

    def __init__(self, pages: list[list[dict]] | None = None, fail_list: bool = False) -> None:
        self.pages = pages or []
        self.fail_list = fail_list
        self.requests: list[httpx.Request] = []

    def github_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.github.com"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "api.github.com":
            _, _, owner, repo = request.url.path.split("/")
            stars = STARS.get(f"{owner}/{repo}")
            if stars is None:
                return httpx.Response(404)
            return httpx.Response(200, json={"stargazers_count": stars})

        if self.fail_list:
            return httpx.Response(502)
        cursor = request.url.params.get("cursor")
        index = int(cursor) if cursor else 0
        body: dict = {"servers": self.pages[index], "metadata": {}}
        if index + 1 < len(self.pages):
            body["metadata"]["nextCursor"] = str(index + 1)
        return httpx.Response(200, json=body)


def _run_official(root: Path, upstream: FakeUpstream, cache: StarCache | None = None):
    adapter = OfficialRegistryAdapter(base_url=REGISTRY_BASE, delay=0)
    return asyncio.run(
        run(
            adapter,
            root,
            transport=httpx.MockTransport(upstream),
            star_cache=cache,
            github_delay=0,
        )
    )


@pytest.fixture(autouse=True)
def _no_github_token(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


# --- Official registry ---


def test_official_end_to_end(tmp_path):
    upstream = FakeUpstream(pages=[THREE_RECORDS[:2], THREE_RECORDS[2:]])
    report = _run_official(tmp_path, upstream)

    out = tmp_path / "official"
    index = json.loads((out / "index.json").read_text())
    assert [(e["id"], e["stars"]) for e in index] == [
        ("io.github.beta/notes", 50),
        ("io.github.alpha/weather", 10),
    ]
    # the isLatest record survived dedupe, not the newer one
    assert index[1]["repository"]["url"] == "https://github.com/alpha/weather"

    details = sorted(p.name for p in (out / "details").iterdir())
    assert details == ["io.github.alpha__weather.json", "io.github.beta__notes.json"]
    weather = json.loads((out / "details" / "io.github.alpha__weather.json").read_text())
    assert weather["id"] == "io.github.alpha/weather"
    assert weather["stars"] == 10

    assert report.fetched == 3
    assert report.unique == 2
    assert report.details_written == 2
    assert report.details_failed == 0
    # legacy repository is never looked up
    assert [r.url.path for r in upstream.github_calls()] == [
        "/repos/alpha/weather",
        "/repos/beta/notes",
    ]


def test_official_sends_registry_headers(tmp_path):
    upstream = FakeUpstream(pages=[THREE_RECORDS])
    _run_official(tmp_path, upstream)

    registry_calls = [r for r in upstream.requests if r.url.host == "registry.test"]
    assert registry_calls[0].url.path == "/v0.1/servers"
    assert registry_calls[0].headers["User-Agent"] == "MCP-Dock-Sync/1.0"
    assert "application/json" in registry_calls[0].headers["Accept"]


def test_official_github_token_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_secret")
    upstream = FakeUpstream(pages=[THREE_RECORDS])
    _run_official(tmp_path, upstream)

    calls = upstream.github_calls()
    assert calls
    assert all(r.headers["Authorization"] == "token ghp_secret" for r in calls)


def test_official_idempotent(tmp_path):
    out = tmp_path / "official"

    _run_official(tmp_path, FakeUpstream(pages=[THREE_RECORDS]))
    first_index = (out / "index.json").read_bytes()
    first_details = {p.name: p.read_bytes() for p in (out / "details").iterdir()}

    _run_official(tmp_path, FakeUpstream(pages=[THREE_RECORDS]))
    assert (out / "index.json").read_bytes() == first_index
    assert {p.name: p.read_bytes() for p in (out / "details").iterdir()} == first_details


def test_official_purges_orphans(tmp_path):
    _run_official(tmp_path, FakeUpstream(pages=[THREE_RECORDS]))
    # beta/notes disappears upstream
    _run_official(tmp_path, FakeUpstream(pages=[THREE_RECORDS[:2]]))

    details = sorted(p.name for p in (tmp_path / "official" / "details").iterdir())
    assert details == ["io.github.alpha__weather.json"]


def test_official_list_failure_is_fatal_and_keeps_previous_output(tmp_path):
    _run_official(tmp_path, FakeUpstream(pages=[THREE_RECORDS]))

    with pytest.raises(httpx.HTTPStatusError):
        _run_official(tmp_path, FakeUpstream(fail_list=True))

    details = sorted(p.name for p in (tmp_path / "official" / "details").iterdir())
    assert len(details) == 2


def test_official_detail_write_failure_is_counted(tmp_path):
    blocked = tmp_path / "official" / "details" / "io.github.alpha__weather.json"
    blocked.mkdir(parents=True)

    report = _run_official(tmp_path, FakeUpstream(pages=[THREE_RECORDS]))

    assert report.details_failed == 1
    assert report.details_written == 1
    out = tmp_path / "official"
    assert (out / "details" / "io.github.beta__notes.json").is_file()
    index = json.loads((out / "index.json").read_text())
    assert [e["id"] for e in index] == ["io.github.beta/notes", "io.github.alpha/weather"]


def test_official_shared_star_cache(tmp_path):
    cache = StarCache()
    upstream = FakeUpstream(pages=[THREE_RECORDS])
    _run_official(tmp_path, upstream, cache=cache)
    assert cache.get("beta/notes") == 50
    assert len(upstream.github_calls()) == 2


def test_official_fixture_filtering(tmp_path):
    with open(FIXTURES / "official_registry.json") as f:
        raw = json.load(f)
    upstream = FakeUpstream(pages=[raw])
    report = _run_official(tmp_path, upstream)

    index = json.loads((tmp_path / "official" / "index.json").read_text())
    # remote-only, empty, nuget-only and nameless entries filtered out
    assert [e["id"] for e in index] == ["io.github.beta/notes", "io.github.alpha/weather"]
    assert report.unique == 5
    assert report.published == 2


# --- Smithery ---


def _smithery_upstream(requests: list[httpx.Request]):
    with open(FIXTURES / "smithery_servers.json") as f:
        data = json.load(f)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path == "/servers":
            page = int(request.url.params["page"])
            servers = data["list"] if page == 1 else []
            return httpx.Response(200, json={"servers": servers})
        name = unquote(request.url.raw_path.decode().split("/servers/", 1)[1])
        detail = data["details"].get(name)
        if detail is None:
            return httpx.Response(500, json={"error": "boom"})
        return httpx.Response(200, json=detail)

    return httpx.MockTransport(handler)


def _run_smithery(root: Path, requests: list[httpx.Request]):
    adapter = SmitheryAdapter(base_url=SMITHERY_BASE, delay=0, detail_delay=0)
    return asyncio.run(run(adapter, root, transport=_smithery_upstream(requests)))


def test_smithery_end_to_end(tmp_path):
    requests: list[httpx.Request] = []
    report = _run_smithery(tmp_path, requests)

    index = json.loads((tmp_path / "index.json").read_text())
    # upstream order, no ranking
    assert [e["id"] for e in index] == ["@acme/search", "files", "broken-detail"]
    assert "stars" not in index[0]

    details = sorted(p.name for p in (tmp_path / "details").iterdir())
    assert details == ["@acme__search.json", "files.json"]
    assert report.details_written == 2
    assert report.details_failed == 1

    # no GitHub enrichment for Smithery
    assert all(r.url.host == "smithery.test" for r in requests)


def test_smithery_detail_name_is_url_encoded(tmp_path):
    requests: list[httpx.Request] = []
    _run_smithery(tmp_path, requests)

    raw_paths = [r.url.raw_path.decode() for r in requests]
    assert "/servers/%40acme%2Fsearch" in raw_paths


def test_smithery_does_not_purge(tmp_path):
    stale = tmp_path / "details" / "removed__server.json"
    stale.parent.mkdir(parents=True)
    stale.write_text("{}")

    _run_smithery(tmp_path, [])
    assert stale.exists()
