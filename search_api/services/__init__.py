"""Search engine integrations used by the aggregation API.

This package holds everything between an incoming query and the merged
result list:

- engines: Engine targets and the search URL builder
- fetcher: Async HTML fetcher with retry and backoff
- parsers: Selector-driven result page parsers, keyed by engine site
- aggregator: Cache-backed orchestration over all configured engines

Example Usage:
    >>> from search_api.core.config import SearchSettings
    >>> from search_api.services import SearchAggregator
    >>>
    >>> aggregator = SearchAggregator.from_settings(SearchSettings.from_env())
    >>> outcome = await aggregator.search("kyoto")
"""

from search_api.services.engines import (
    ENGINES,
    EngineTarget,
    build_search_url,
    get_engine,
    resolve_engines,
)
from search_api.services.fetcher import HtmlFetcher
from search_api.services.parsers import (
    PARSERS,
    SelectorParser,
    SelectorSet,
    parse,
    register_parser,
    truncate,
)
from search_api.services.aggregator import SearchAggregator

__all__ = [
    # Engines
    "ENGINES",
    "EngineTarget",
    "build_search_url",
    "get_engine",
    "resolve_engines",
    # Fetching
    "HtmlFetcher",
    # Parsing
    "PARSERS",
    "SelectorParser",
    "SelectorSet",
    "parse",
    "register_parser",
    "truncate",
    # Aggregation
    "SearchAggregator",
]
