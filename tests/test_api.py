"""Integration-focused tests for the search aggregator FastAPI surface."""
from __future__ import annotations

from datetime import datetime

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeFetcher
from search_api.api import app as api_app
from search_api.core.cache import TTLCache
from search_api.core.domain import AggregationResult, EngineFailure
from search_api.core.errors import TransientFetchError, UnknownEngineError
from search_api.services.aggregator import SearchAggregator
from search_api.services.engines import ENGINES
from search_api.services.fetcher import HtmlFetcher


@pytest.fixture
def fetcher(kyoto_pages) -> FakeFetcher:
    return FakeFetcher(kyoto_pages)


@pytest.fixture
def aggregator(fetcher, clock) -> SearchAggregator:
    return SearchAggregator(fetcher, TTLCache(300, clock=clock), list(ENGINES.values()))


@pytest.fixture
def client(monkeypatch, aggregator: SearchAggregator) -> TestClient:
    """Yield a TestClient whose aggregator uses canned engine pages."""

    monkeypatch.setattr(api_app, "get_aggregator", lambda: aggregator)
    with TestClient(api_app.app) as test_client:
        yield test_client


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["time"].endswith("Z")
    datetime.fromisoformat(data["time"].replace("Z", "+00:00"))


@pytest.mark.parametrize("path", ["/search", "/search?q=", "/search?q=%20%20%20"])
def test_search_without_query_is_rejected(client: TestClient, fetcher: FakeFetcher, path: str) -> None:
    response = client.get(path)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing q query parameter"}
    assert fetcher.calls == []


def test_search_kyoto_end_to_end(client: TestClient, fetcher: FakeFetcher) -> None:
    response = client.get("/search", params={"q": "kyoto"})

    assert response.status_code == 200
    assert response.headers["X-Cache"] == "MISS"
    data = response.json()
    assert len(data) == 10
    assert [item["site"] for item in data] == ["google.com"] * 4 + ["naver.com"] * 3 + ["bing.com"] * 3
    assert set(data[0]) == {"title", "url", "snippet", "site"}
    assert len(fetcher.calls) == 3


def test_repeat_query_is_byte_identical_and_skips_engines(
    client: TestClient, fetcher: FakeFetcher, clock
) -> None:
    first = client.get("/search", params={"q": "kyoto"})
    clock.advance(120)
    second = client.get("/search", params={"q": "kyoto"})

    assert second.status_code == 200
    assert second.content == first.content
    assert second.headers["X-Cache"] == "HIT"
    assert len(fetcher.calls) == 3


def test_query_after_ttl_fetches_again(client: TestClient, fetcher: FakeFetcher, clock) -> None:
    client.get("/search", params={"q": "kyoto"})
    clock.advance(301)
    response = client.get("/search", params={"q": "kyoto"})

    assert response.headers["X-Cache"] == "MISS"
    assert len(fetcher.calls) == 6


def test_engine_failure_returns_500(client: TestClient, fetcher: FakeFetcher) -> None:
    fetcher.failures["www.bing.com"] = TransientFetchError("https://www.bing.com", 3)

    response = client.get("/search", params={"q": "kyoto"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to perform search"}


def test_unknown_engine_surfaces_as_500(client: TestClient, fetcher: FakeFetcher) -> None:
    fetcher.failures["www.google.com"] = UnknownEngineError("google")

    response = client.get("/search", params={"q": "kyoto"})
    assert response.status_code == 500


def test_isolated_failure_exposes_warnings_header(
    client: TestClient, fetcher: FakeFetcher, aggregator: SearchAggregator
) -> None:
    aggregator.isolate_failures = True
    fetcher.failures["search.naver.com"] = TransientFetchError("https://search.naver.com", 3)

    response = client.get("/search", params={"q": "kyoto"})

    assert response.status_code == 200
    assert [item["site"] for item in response.json()] == ["google.com"] * 4 + ["bing.com"] * 5
    assert response.headers["X-Search-Warnings"].startswith("naver.com: Failed to fetch")


def test_warnings_header_stays_on_one_line_for_http_status_errors(
    monkeypatch, kyoto_pages, clock
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "search.naver.com":
            return httpx.Response(503, text="busy")
        return httpx.Response(200, text=kyoto_pages[request.url.host])

    async def no_sleep(seconds: float) -> None:
        return None

    fetcher = HtmlFetcher(
        retries=1,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=no_sleep,
    )
    aggregator = SearchAggregator(
        fetcher, TTLCache(300, clock=clock), list(ENGINES.values()), isolate_failures=True
    )
    monkeypatch.setattr(api_app, "get_aggregator", lambda: aggregator)

    with TestClient(api_app.app) as test_client:
        response = test_client.get("/search", params={"q": "kyoto"})

    assert response.status_code == 200
    assert [item["site"] for item in response.json()] == ["google.com"] * 4 + ["bing.com"] * 5
    header = response.headers["X-Search-Warnings"]
    assert header.startswith("naver.com: Failed to fetch")
    assert "503" in header
    assert "\n" not in header and "\r" not in header
    assert all(0x20 <= ord(ch) < 0x7F for ch in header)


def test_warnings_header_replaces_control_characters() -> None:
    outcome = AggregationResult(
        query="kyoto",
        warnings=[
            EngineFailure(engine="naver.com", error="Server error '503'\r\nFor more information\x00 check"),
            EngineFailure(engine="bing.com", error="교토 timeout"),
        ],
    )

    header = api_app._warnings_header(outcome)

    assert header == (
        "naver.com: Server error '503' For more information check; "
        "bing.com: \\uad50\\ud1a0 timeout"
    )
