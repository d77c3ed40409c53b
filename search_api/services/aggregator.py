"""Multi-engine search aggregation: cache, fetch, parse, tag, merge."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Protocol, Sequence, Union

from search_api.core.cache import TTLCache
from search_api.core.config import SearchSettings
from search_api.core.domain import AggregationResult, EngineFailure, SearchResult
from search_api.core.errors import AggregationFailure, QueryValidationError, UnknownEngineError
from search_api.services.engines import EngineTarget, resolve_engines
from search_api.services.fetcher import HtmlFetcher
from search_api.services.parsers import SelectorParser, default_parsers, parse


logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch_html(self, url: str) -> str: ...

    async def aclose(self) -> None: ...


EngineOutcome = Union[List[SearchResult], BaseException]


def normalise_query(query: Optional[str]) -> str:
    """Trim ``query`` and reject it when nothing is left."""

    normalised = (query or "").strip()
    if not normalised:
        raise QueryValidationError()
    return normalised


class SearchAggregator:
    """Query every configured engine and merge their results.

    Engines are processed in declaration order. By default they are fetched
    one after another and the first failing engine aborts the whole search
    with ``AggregationFailure``. Two switches change that:

    - ``concurrent``: fetch all engines at once with ``asyncio.gather``;
      results are still merged in declaration order.
    - ``isolate_failures``: a failing engine is reported in
      ``AggregationResult.warnings`` and the others still contribute.
      Partial results are not cached.

    Attributes:
        fetcher: Object exposing ``fetch_html(url)``.
        cache: TTL cache keyed by the trimmed query.
        engines: Ordered engine targets.
        parsers: Parser registry keyed by engine site.
        result_limit: Maximum number of merged results returned.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        cache: TTLCache[List[SearchResult]],
        engines: Sequence[EngineTarget],
        *,
        parsers: Optional[Dict[str, SelectorParser]] = None,
        result_limit: int = 10,
        isolate_failures: bool = False,
        concurrent: bool = False,
    ) -> None:
        self.fetcher = fetcher
        self.cache = cache
        self.engines = list(engines)
        self.parsers = parsers
        self.result_limit = result_limit
        self.isolate_failures = isolate_failures
        self.concurrent = concurrent

    @classmethod
    def from_settings(cls, settings: SearchSettings) -> "SearchAggregator":
        """Wire the production fetcher, cache and parsers from settings."""

        fetcher = HtmlFetcher(
            timeout_s=settings.fetch_timeout_s,
            retries=settings.fetch_retries,
            backoff_s=settings.retry_backoff_s,
        )
        cache: TTLCache[List[SearchResult]] = TTLCache(
            settings.cache_ttl_s, max_entries=settings.cache_max_entries
        )
        return cls(
            fetcher,
            cache,
            resolve_engines(settings.engines),
            parsers=default_parsers(settings.snippet_limit),
            result_limit=settings.result_limit,
            isolate_failures=settings.isolate_failures,
            concurrent=settings.concurrent,
        )

    def __repr__(self) -> str:
        engines = ", ".join(engine.name for engine in self.engines)
        return (
            f"SearchAggregator(engines=[{engines}], result_limit={self.result_limit}, "
            f"isolate_failures={self.isolate_failures}, concurrent={self.concurrent}, "
            f"cached_queries={len(self.cache)})"
        )

    async def aclose(self) -> None:
        await self.fetcher.aclose()

    async def search(self, query: Optional[str]) -> AggregationResult:
        """Return at most ``result_limit`` results for ``query``."""

        key = normalise_query(query)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Cache hit for %r (%d results)", key, len(cached))
            return AggregationResult(query=key, results=list(cached), cached=True)

        logger.info("Cache miss for %r; querying %d engine(s)", key, len(self.engines))
        if self.concurrent:
            outcomes = await asyncio.gather(
                *(self._collect(engine, key) for engine in self.engines),
                return_exceptions=True,
            )
        else:
            outcomes = []
            for engine in self.engines:
                try:
                    outcomes.append(await self._collect(engine, key))
                except Exception as exc:
                    outcomes.append(exc)
                    if not self.isolate_failures:
                        break

        aggregated: List[SearchResult] = []
        warnings: List[EngineFailure] = []
        for engine, outcome in zip(self.engines, outcomes):
            if isinstance(outcome, BaseException):
                self._handle_failure(engine, outcome)
                warnings.append(EngineFailure(engine=engine.site, error=str(outcome)))
                continue
            aggregated.extend(outcome)

        results = aggregated[: self.result_limit]
        if warnings:
            logger.warning(
                "Partial results for %r; failed engines: %s",
                key,
                ", ".join(failure.engine for failure in warnings),
            )
        else:
            self.cache.set(key, results)
        return AggregationResult(query=key, results=list(results), warnings=warnings)

    async def _collect(self, engine: EngineTarget, query: str) -> List[SearchResult]:
        url = engine.build_url(query)
        html = await self.fetcher.fetch_html(url)
        parsed = parse(engine.site, html, self.parsers)
        logger.debug("%s returned %d result(s)", engine.site, len(parsed))
        return [item.tag(engine.site) for item in parsed]

    def _handle_failure(self, engine: EngineTarget, exc: BaseException) -> None:
        if isinstance(exc, UnknownEngineError) or not isinstance(exc, Exception):
            raise exc
        if not self.isolate_failures:
            raise AggregationFailure(engine.site, exc) from exc
        logger.warning("Engine %s failed and was skipped: %s", engine.site, exc)
