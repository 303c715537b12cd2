"""Search oracle: the external title/snippet search service."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
import structlog

from wplink.config import OracleConfig
from wplink.types import SearchResult

log = structlog.get_logger()


class SearchOracle(Protocol):
    """Protocol for search backends. May raise on failure."""

    async def search(self, term: str) -> list[SearchResult]: ...


def parse_search_response(data: Any) -> list[SearchResult]:
    """Extract ranked results from a MediaWiki ``list=search`` payload.

    Anything that does not look like a search payload yields no results.
    """
    if not isinstance(data, dict):
        return []
    query = data.get("query")
    if not isinstance(query, dict):
        return []
    hits = query.get("search")
    if not isinstance(hits, list):
        return []

    results: list[SearchResult] = []
    for hit in hits:
        if not isinstance(hit, dict) or not hit.get("title"):
            continue
        results.append(SearchResult(title=str(hit["title"]), snippet=str(hit.get("snippet") or "")))
    return results


class WikipediaSearchOracle:
    """SearchOracle backed by the MediaWiki search API."""

    def __init__(
        self, config: OracleConfig | None = None, client: httpx.AsyncClient | None = None
    ) -> None:
        self.config = config or OracleConfig()
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.config.user_agent},
            )
        return self._client

    async def search(self, term: str) -> list[SearchResult]:
        params = {
            "action": "query",
            "list": "search",
            "srsearch": term,
            "srlimit": self.config.result_limit,
            "format": "json",
        }
        response = await self._get_client().get(self.config.api_url, params=params)
        response.raise_for_status()
        results = parse_search_response(response.json())
        log.debug("oracle_results", term=term, count=len(results))
        return results

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


class OracleAdapter:
    """Failure-swallowing boundary in front of a SearchOracle.

    Every query resolves to a (possibly empty) result list, so a failing
    lookup never breaks the join over sibling lookups.
    """

    def __init__(self, oracle: SearchOracle, config: OracleConfig | None = None) -> None:
        self.oracle = oracle
        self.config = config or OracleConfig()
        self._semaphore = (
            asyncio.Semaphore(self.config.max_concurrency)
            if self.config.max_concurrency > 0
            else None
        )
        self.queries: int = 0
        self.failures: int = 0

    async def query(self, term: str) -> list[SearchResult]:
        self.queries += 1
        try:
            if self._semaphore is None:
                return await self._search(term)
            async with self._semaphore:
                return await self._search(term)
        except Exception as e:
            self.failures += 1
            log.warning(
                "oracle_query_failed",
                term=term,
                error=str(e) or type(e).__name__,
            )
            return []

    async def _search(self, term: str) -> list[SearchResult]:
        if self.config.timeout is None:
            return await self.oracle.search(term)
        return await asyncio.wait_for(self.oracle.search(term), self.config.timeout)
