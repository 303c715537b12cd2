"""Tests for the search oracle adapter."""

import asyncio

import httpx
import pytest
import respx

from wplink.config import OracleConfig
from wplink.oracle import OracleAdapter, WikipediaSearchOracle, parse_search_response
from wplink.types import SearchResult

API_URL = "https://en.wikipedia.org/w/api.php"

SEARCH_PAYLOAD = {
    "batchcomplete": "",
    "query": {
        "searchinfo": {"totalhits": 2},
        "search": [
            {"ns": 0, "title": "Marie Curie", "snippet": 'Maria <span class="searchmatch">Curie</span>'},
            {"ns": 0, "title": "Pierre Curie", "snippet": "French physicist"},
        ],
    },
}


class FailingOracle:
    def __init__(self, error: Exception):
        self.error = error
        self.calls: list[str] = []

    async def search(self, term: str) -> list[SearchResult]:
        self.calls.append(term)
        raise self.error


class SlowOracle:
    async def search(self, term: str) -> list[SearchResult]:
        await asyncio.sleep(5)
        return [SearchResult(term)]


async def _search_and_close(oracle: WikipediaSearchOracle, term: str) -> list[SearchResult]:
    try:
        return await oracle.search(term)
    finally:
        await oracle.aclose()


class TestParseSearchResponse:
    def test_parses_results_in_order(self):
        results = parse_search_response(SEARCH_PAYLOAD)
        assert [r.title for r in results] == ["Marie Curie", "Pierre Curie"]
        assert results[0].snippet == 'Maria <span class="searchmatch">Curie</span>'

    def test_missing_query_is_empty(self):
        assert parse_search_response({"error": {"code": "badvalue"}}) == []

    def test_non_dict_is_empty(self):
        assert parse_search_response(["not", "a", "payload"]) == []

    def test_missing_snippet_defaults_to_empty(self):
        results = parse_search_response({"query": {"search": [{"title": "Physics"}]}})
        assert results == [SearchResult("Physics", "")]

    def test_skips_hits_without_title(self):
        results = parse_search_response({"query": {"search": [{"snippet": "x"}, {"title": "Y"}]}})
        assert [r.title for r in results] == ["Y"]


class TestWikipediaSearchOracle:
    @respx.mock
    def test_sends_search_query(self):
        route = respx.get(API_URL).mock(return_value=httpx.Response(200, json=SEARCH_PAYLOAD))
        oracle = WikipediaSearchOracle(OracleConfig(api_url=API_URL))

        results = asyncio.run(_search_and_close(oracle, "Marie Curie"))

        assert [r.title for r in results] == ["Marie Curie", "Pierre Curie"]
        params = route.calls.last.request.url.params
        assert params["action"] == "query"
        assert params["list"] == "search"
        assert params["srsearch"] == "Marie Curie"
        assert params["format"] == "json"

    @respx.mock
    def test_http_error_raises(self):
        respx.get(API_URL).mock(return_value=httpx.Response(503))
        oracle = WikipediaSearchOracle(OracleConfig(api_url=API_URL))

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(_search_and_close(oracle, "Marie Curie"))

    @respx.mock
    def test_adapter_swallows_http_error(self):
        respx.get(API_URL).mock(return_value=httpx.Response(500))
        oracle = WikipediaSearchOracle(OracleConfig(api_url=API_URL))
        adapter = OracleAdapter(oracle, OracleConfig(api_url=API_URL))

        async def run():
            try:
                return await adapter.query("Marie Curie")
            finally:
                await oracle.aclose()

        assert asyncio.run(run()) == []
        assert adapter.failures == 1


class TestOracleAdapter:
    def test_failure_becomes_empty_result(self):
        oracle = FailingOracle(httpx.ConnectError("unreachable"))
        adapter = OracleAdapter(oracle)

        assert asyncio.run(adapter.query("Physics")) == []
        assert adapter.queries == 1
        assert adapter.failures == 1
        assert oracle.calls == ["Physics"]

    def test_arbitrary_exception_is_swallowed(self):
        adapter = OracleAdapter(FailingOracle(ValueError("bad json")))
        assert asyncio.run(adapter.query("Physics")) == []

    def test_timeout_counts_as_failure(self):
        adapter = OracleAdapter(SlowOracle(), OracleConfig(timeout=0.01))
        assert asyncio.run(adapter.query("Physics")) == []
        assert adapter.failures == 1

    def test_no_timeout_or_concurrency_cap(self):
        class QuickOracle:
            async def search(self, term: str) -> list[SearchResult]:
                return [SearchResult(term)]

        adapter = OracleAdapter(QuickOracle(), OracleConfig(timeout=None, max_concurrency=0))
        assert asyncio.run(adapter.query("Physics")) == [SearchResult("Physics")]
        assert adapter.failures == 0
