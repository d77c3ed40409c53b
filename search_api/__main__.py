"""Run the search API with uvicorn: ``python -m search_api``."""
from __future__ import annotations

import logging

import uvicorn

from search_api.api.dependencies import get_settings
from search_api.core.config import configure_logging


logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Custom Search API listening on port %d", settings.port)
    uvicorn.run(
        "search_api.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
