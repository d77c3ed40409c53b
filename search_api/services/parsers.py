"""Selector-driven parsers that turn engine result pages into ``ParsedResult`` lists.

Each engine is described by a ``SelectorSet``: a repeating result container
plus title, link and snippet selectors evaluated inside it. Selector sets are
plain data so that markup changes on an engine only require a new set with a
bumped ``version``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from search_api.core.domain import ParsedResult


logger = logging.getLogger(__name__)

SNIPPET_LIMIT = 300
ELLIPSIS = "..."


def truncate(text: Optional[str], limit: int = SNIPPET_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters, appending an ellipsis when cut."""

    if not text:
        return ""
    return f"{text[:limit]}{ELLIPSIS}" if len(text) > limit else text


def normalise_whitespace(text: str) -> str:
    return " ".join(text.split())


@dataclass(frozen=True)
class SelectorSet:
    """CSS selectors describing one engine's result markup."""

    container: str
    title: str
    link: str
    snippet: str
    version: str = "1"


class SelectorParser:
    """Apply a ``SelectorSet`` to raw HTML."""

    def __init__(
        self,
        selectors: SelectorSet,
        *,
        base_url: Optional[str] = None,
        snippet_limit: int = SNIPPET_LIMIT,
    ) -> None:
        self.selectors = selectors
        self.base_url = base_url
        self.snippet_limit = snippet_limit

    def __call__(self, html: str) -> List[ParsedResult]:
        return self.parse(html)

    def parse(self, html: str) -> List[ParsedResult]:
        if not html:
            return []
        soup = BeautifulSoup(html, "html.parser")
        results: List[ParsedResult] = []
        for container in soup.select(self.selectors.container):
            parsed = self._parse_container(container)
            if parsed is not None:
                results.append(parsed)
        return results

    def _parse_container(self, container: Tag) -> Optional[ParsedResult]:
        title_el = container.select_one(self.selectors.title)
        link_el = container.select_one(self.selectors.link)
        title = normalise_whitespace(title_el.get_text(" ")) if title_el else ""
        href = link_el.get("href") if link_el else None
        url = self._resolve(href)
        # Scraped markup is unreliable; partial results are skipped silently.
        if not title or not url:
            return None

        snippet = normalise_whitespace(
            " ".join(el.get_text(" ") for el in container.select(self.selectors.snippet))
        )
        return ParsedResult(title=title, url=url, snippet=truncate(snippet, self.snippet_limit))

    def _resolve(self, href: Optional[str]) -> str:
        href = (href or "").strip()
        if not href:
            return ""
        if href.startswith(("http://", "https://")) or not self.base_url:
            return href
        return urljoin(self.base_url, href)


GOOGLE_SELECTORS = SelectorSet(container="div.g", title="h3", link="a", snippet="span.aCOpRe")
NAVER_SELECTORS = SelectorSet(container="div.total_wrap", title="a", link="a", snippet="div.total_group")
BING_SELECTORS = SelectorSet(container="li.b_algo", title="h2", link="h2 a", snippet="p")


def default_parsers(snippet_limit: int = SNIPPET_LIMIT) -> Dict[str, SelectorParser]:
    """Build the parser registry for the built-in engines, keyed by site."""

    return {
        "google.com": SelectorParser(
            GOOGLE_SELECTORS, base_url="https://www.google.com", snippet_limit=snippet_limit
        ),
        "naver.com": SelectorParser(
            NAVER_SELECTORS, base_url="https://search.naver.com", snippet_limit=snippet_limit
        ),
        "bing.com": SelectorParser(
            BING_SELECTORS, base_url="https://www.bing.com", snippet_limit=snippet_limit
        ),
    }


PARSERS: Dict[str, SelectorParser] = default_parsers()


def register_parser(site: str, parser: SelectorParser) -> None:
    """Add or replace the parser used for ``site``."""

    PARSERS[site] = parser


def parse(site: str, html: str, parsers: Optional[Dict[str, SelectorParser]] = None) -> List[ParsedResult]:
    """Parse ``html`` produced by ``site``.

    Unknown sites yield an empty list so that an unsupported engine degrades
    to "no results" instead of failing the aggregation. Markup that cannot be
    parsed also yields an empty list.
    """

    registry = PARSERS if parsers is None else parsers
    parser = registry.get(site)
    if parser is None:
        logger.debug("No parser registered for %s", site)
        return []
    try:
        return parser.parse(html)
    except Exception as exc:
        logger.warning("Failed to parse %s markup: %s", site, exc, exc_info=True)
        return []
