from search_api.core.config import SearchSettings
from search_api.services.aggregator import SearchAggregator
from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from functools import lru_cache


@lru_cache(maxsize=1)
def get_settings() -> SearchSettings:
    return SearchSettings.from_env()


@lru_cache(maxsize=1)
def get_aggregator() -> SearchAggregator:
    return SearchAggregator.from_settings(get_settings())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    try:
        yield
    finally:
        # Only close what was actually built during the app's lifetime.
        if get_aggregator.cache_info().currsize:
            aggregator = get_aggregator()
            await aggregator.aclose()
            get_aggregator.cache_clear()
