"""Pydantic models for search results and aggregation outcomes."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ParsedResult(BaseModel):
    """A single result extracted from an engine page, before it is tagged."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1, description="Visible result title")
    url: str = Field(..., min_length=1, description="Destination URL of the result")
    snippet: str = Field(default="", description="Summary text shown under the title")

    def tag(self, site: str) -> "SearchResult":
        """Attach the engine that produced this result."""

        return SearchResult(title=self.title, url=self.url, snippet=self.snippet, site=site)


class SearchResult(BaseModel):
    """Normalised result returned to API callers."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    snippet: str = Field(default="")
    site: str = Field(..., description="Engine that produced the result, e.g. bing.com")


class EngineFailure(BaseModel):
    """An engine that could not contribute to an aggregation."""

    engine: str
    error: str


class AggregationResult(BaseModel):
    """Outcome of one aggregated search."""

    query: str
    results: List[SearchResult] = Field(default_factory=list)
    warnings: List[EngineFailure] = Field(default_factory=list)
    cached: bool = False

    @property
    def partial(self) -> bool:
        return bool(self.warnings)
