"""FastAPI surface for the multi-engine web search aggregator."""
from __future__ import annotations

# Load environment variables from .env file
from dotenv import load_dotenv

# Load .env file before any other imports that might need environment variables
load_dotenv()


import logging
import re
import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from search_api.api.dependencies import get_aggregator, get_settings, lifespan
from search_api.api.schemas import ErrorResponse, HealthResponse
from search_api.core.config import configure_logging
from search_api.core.domain import AggregationResult, SearchResult
from search_api.core.errors import SEARCH_FAILED_MESSAGE, QueryValidationError

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

try:  # pragma: no cover - exercised through import side effects
    import sentry_sdk
except ImportError:  # pragma: no cover - only triggers in lean environments
    sentry_sdk = None  # type: ignore[assignment]
else:  # pragma: no cover - runtime configuration
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn, traces_sample_rate=1.0)

app = FastAPI(title="Search Aggregator API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["X-Cache", "X-Search-Warnings"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


def _warnings_header(outcome: AggregationResult) -> str:
    header = "; ".join(f"{failure.engine}: {failure.error}" for failure in outcome.warnings)
    # httpx status errors span several lines; header values must be one latin-1 line
    header = header.encode("ascii", "backslashreplace").decode("ascii")
    return " ".join(_CONTROL_CHARS.sub(" ", header).split())


@app.get(
    "/search",
    response_model=List[SearchResult],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search(response: Response, q: Optional[str] = Query(default=None)):
    """Search every configured engine for ``q`` and return the merged results.

    The response is a JSON array of at most ``SEARCH_RESULT_LIMIT`` results,
    each tagged with the engine site that produced it, in engine declaration
    order. Identical queries within the cache TTL are answered from memory.

    Headers:
        X-Cache: ``HIT`` when served from the cache, ``MISS`` otherwise.
        X-Search-Warnings: Present only when failure isolation is enabled and
            some engines failed; lists ``site: error`` pairs.

    Raises:
        400 ``{"error": "Missing q query parameter"}`` for an absent or blank query.
        500 ``{"error": "Failed to perform search"}`` when an engine fails.
    """

    aggregator = get_aggregator()
    try:
        outcome = await aggregator.search(q)
    except QueryValidationError as exc:
        logger.info("Rejected search request: %s", exc.message)
        return JSONResponse(status_code=400, content={"error": exc.message})
    except Exception as exc:
        logger.error(f"Search error: {str(exc)}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": SEARCH_FAILED_MESSAGE})

    response.headers["X-Cache"] = "HIT" if outcome.cached else "MISS"
    if outcome.partial:
        response.headers["X-Search-Warnings"] = _warnings_header(outcome)
    return outcome.results


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Simple health endpoint used for liveness probes."""

    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return HealthResponse(status="ok", time=now.replace("+00:00", "Z"))
