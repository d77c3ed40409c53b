"""Pytest configuration for the search aggregator project."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import pytest

# Ensure the project root is on sys.path so that import search_api works under pytest.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def google_html(count: int, prefix: str = "g") -> str:
    items = "".join(
        f'<div class="g"><a href="https://{prefix}{i}.example.com/"><h3>{prefix.upper()} result {i}</h3></a>'
        f'<span class="aCOpRe">Snippet {i} from google</span></div>'
        for i in range(count)
    )
    return f"<html><body><div id='search'>{items}</div></body></html>"


def naver_html(count: int, prefix: str = "n") -> str:
    items = "".join(
        f'<div class="total_wrap"><a href="https://{prefix}{i}.example.kr/">{prefix.upper()} result {i}</a>'
        f'<div class="total_group">Snippet {i} from naver</div></div>'
        for i in range(count)
    )
    return f"<html><body>{items}</body></html>"


def bing_html(count: int, prefix: str = "b") -> str:
    items = "".join(
        f'<li class="b_algo"><h2><a href="https://{prefix}{i}.example.org/">{prefix.upper()} result {i}</a></h2>'
        f"<p>Snippet {i} from bing</p></li>"
        for i in range(count)
    )
    return f"<html><body><ol id='b_results'>{items}</ol></body></html>"


class FakeFetcher:
    """Serve canned HTML per host and record every requested URL."""

    def __init__(self, pages: Dict[str, str], failures: Dict[str, Exception] | None = None) -> None:
        self.pages = pages
        self.failures = failures or {}
        self.calls: List[str] = []
        self.closed = False

    async def fetch_html(self, url: str) -> str:
        self.calls.append(url)
        for host, exc in self.failures.items():
            if host in url:
                raise exc
        for host, html in self.pages.items():
            if host in url:
                return html
        return ""

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kyoto_pages() -> Dict[str, str]:
    """Three engines returning 4, 3 and 5 well-formed results."""

    return {
        "www.google.com": google_html(4),
        "search.naver.com": naver_html(3),
        "www.bing.com": bing_html(5),
    }
