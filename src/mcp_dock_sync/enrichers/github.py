"""GitHub star enricher.

Resolves a repository URL to ``owner/repo`` and looks up its star count.
Lookups are sequential with a fixed delay between them, memoized per run in
a ``StarCache``, and never raise: any failure counts as zero stars.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence

import httpx

from mcp_dock_sync import config
from mcp_dock_sync.enrichers.base import Enricher

# https://github.com/owner/repo[.git][/...] and git@github.com:owner/repo[.git]
_GITHUB_PATTERNS = (
    re.compile(r"github\.com/(?P<owner>[^/]+)/(?P<repo>[^/?#]+)"),
    re.compile(r"github\.com:(?P<owner>[^/]+)/(?P<repo>[^/?#]+)"),
)


def parse_repo_url(url: str | None) -> tuple[str, str] | None:
    """Extract (owner, repo) from a GitHub URL, or None if not a match."""
    if not url:
        return None
    for pattern in _GITHUB_PATTERNS:
        m = pattern.search(url)
        if m:
            repo = m.group("repo")
            if repo.endswith(".git"):
                repo = repo[: -len(".git")]
            return m.group("owner"), repo
    return None


class StarCache:
    """Run-scoped ``owner/repo`` -> star count memo. Not persisted."""

    __slots__ = ("_stars",)

    def __init__(self) -> None:
        self._stars: dict[str, int] = {}

    def get(self, key: str) -> int | None:
        return self._stars.get(key)

    def set(self, key: str, stars: int) -> None:
        self._stars[key] = stars

    def __contains__(self, key: object) -> bool:
        return key in self._stars

    def __len__(self) -> int:
        return len(self._stars)


class GitHubStarEnricher(Enricher):
    """Looks up stargazer counts for servers with GitHub repository URLs."""

    def __init__(
        self,
        cache: StarCache,
        token: str | None = None,
        delay: float = config.GITHUB_FETCH_DELAY,
    ) -> None:
        self._cache = cache
        self._delay = delay
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": config.USER_AGENT,
        }
        if token:
            self._headers["Authorization"] = f"token {token}"

    async def stars_for(self, client: httpx.AsyncClient, repo_url: str | None) -> int:
        """Return the star count for ``repo_url``; 0 when unknown."""
        parsed = parse_repo_url(repo_url)
        if parsed is None:
            return 0

        owner, repo = parsed
        cache_key = f"{owner}/{repo}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        stars = await self._fetch_stars(client, owner, repo)
        self._cache.set(cache_key, stars)
        return stars

    async def _fetch_stars(
        self, client: httpx.AsyncClient, owner: str, repo: str
    ) -> int:
        try:
            resp = await client.get(
                f"{config.GITHUB_API_BASE}/repos/{owner}/{repo}",
                headers=self._headers,
            )
        except (httpx.HTTPError, httpx.InvalidURL):
            return 0
        # Missing or private repository.
        if not resp.is_success:
            return 0
        try:
            data = resp.json()
        except ValueError:
            return 0
        if not isinstance(data, dict):
            return 0
        stars = data.get("stargazers_count") or 0
        return stars if isinstance(stars, int) else 0

    async def enrich(
        self,
        client: httpx.AsyncClient,
        targets: Sequence[tuple[str, str | None]],
    ) -> dict[str, int]:
        """Resolve stars for each (name, repo_url); non-GitHub URLs score 0."""
        results: dict[str, int] = {}
        looked_up = 0

        for name, repo_url in targets:
            if not repo_url or "github.com" not in repo_url:
                results[name] = 0
                continue

            results[name] = await self.stars_for(client, repo_url)
            looked_up += 1
            if looked_up % config.GITHUB_PROGRESS_EVERY == 0:
                print(f"  Fetched {looked_up} repos...")

            await asyncio.sleep(self._delay)

        print(
            f"  Fetched stars for {looked_up} GitHub repos "
            f"({len(self._cache)} unique)"
        )
        return results
