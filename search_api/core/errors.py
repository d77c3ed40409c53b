"""Exception hierarchy shared by the search services and the HTTP layer."""
from __future__ import annotations

from typing import Optional


MISSING_QUERY_MESSAGE = "Missing q query parameter"
SEARCH_FAILED_MESSAGE = "Failed to perform search"


class SearchApiError(Exception):
    """Base class for every error raised by the search API."""


class ConfigurationError(SearchApiError):
    """Raised when environment settings cannot be interpreted."""


class QueryValidationError(SearchApiError):
    """The incoming query is missing or blank."""

    def __init__(self, message: str = MISSING_QUERY_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class UnknownEngineError(SearchApiError):
    """An engine identifier was requested that is not registered."""

    def __init__(self, engine: str) -> None:
        super().__init__(f"Unknown engine: {engine}")
        self.engine = engine


class TransientFetchError(SearchApiError):
    """A page could not be fetched even after retrying."""

    def __init__(self, url: str, attempts: int, cause: Optional[BaseException] = None) -> None:
        reason = f": {cause}" if cause else ""
        super().__init__(f"Failed to fetch {url} after {attempts} attempt(s){reason}")
        self.url = url
        self.attempts = attempts
        self.cause = cause


class AggregationFailure(SearchApiError):
    """An engine failed while the aggregator was collecting results."""

    def __init__(self, engine: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Engine {engine} failed: {cause}")
        self.engine = engine
        self.cause = cause
