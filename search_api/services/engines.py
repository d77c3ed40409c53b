"""Search engine targets and the URL builder used by the aggregator."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List
from urllib.parse import quote

from search_api.core.errors import UnknownEngineError


@dataclass(frozen=True)
class EngineTarget:
    """Static description of one search engine.

    Attributes:
        name: Logical identifier used in configuration (``"bing"``).
        site: Tag written into every result the engine produces (``"bing.com"``).
        base_url: Origin used to resolve relative result links.
        url_template: Format string with a ``{query}`` placeholder that
            receives the percent-encoded query.
    """

    name: str
    site: str
    base_url: str
    url_template: str

    def build_url(self, query: str) -> str:
        return self.url_template.format(query=encode_query(query))


ENGINES: Dict[str, EngineTarget] = {
    "google": EngineTarget(
        name="google",
        site="google.com",
        base_url="https://www.google.com",
        url_template="https://www.google.com/search?q={query}&hl=ko",
    ),
    "naver": EngineTarget(
        name="naver",
        site="naver.com",
        base_url="https://search.naver.com",
        url_template="https://search.naver.com/search.naver?query={query}",
    ),
    "bing": EngineTarget(
        name="bing",
        site="bing.com",
        base_url="https://www.bing.com",
        url_template="https://www.bing.com/search?q={query}",
    ),
}


def encode_query(query: str) -> str:
    """Percent-encode a query the way ``encodeURIComponent`` does."""

    return quote(query, safe="-_.!~*'()")


def get_engine(name: str) -> EngineTarget:
    """Return the registered target for ``name`` or raise ``UnknownEngineError``."""

    try:
        return ENGINES[name]
    except KeyError:
        raise UnknownEngineError(name) from None


def build_search_url(engine: str, query: str) -> str:
    """Build the engine's search URL for a free-text query."""

    return get_engine(engine).build_url(query)


def resolve_engines(names: Iterable[str]) -> List[EngineTarget]:
    """Map configured engine names to targets, keeping their order."""

    return [get_engine(name) for name in names]
