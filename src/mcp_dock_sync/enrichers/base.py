"""Abstract base for enrichers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import httpx


class Enricher(ABC):
    """Base class for ranking enrichers.

    Each enricher takes ``(server name, repository url)`` pairs and returns
    a dict keyed by server name with an integer enrichment score.
    """

    @abstractmethod
    async def enrich(
        self,
        client: httpx.AsyncClient,
        targets: Sequence[tuple[str, str | None]],
    ) -> dict[str, int]:
        ...
