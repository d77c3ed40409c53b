"""Configuration helpers for the search service environment variables."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from search_api.core.errors import ConfigurationError


DEFAULT_ENGINES = ["google", "naver", "bing"]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


@dataclass(slots=True)
class SearchSettings:
    """Centralised container for the search service tunables."""

    host: str = "0.0.0.0"
    port: int = 4000
    cache_ttl_s: float = 300.0
    cache_max_entries: int = 1000
    result_limit: int = 10
    fetch_timeout_s: float = 10.0
    fetch_retries: int = 2
    retry_backoff_s: float = 0.5
    snippet_limit: int = 300
    isolate_failures: bool = False
    concurrent: bool = False
    engines: List[str] = field(default_factory=lambda: list(DEFAULT_ENGINES))
    log_level: str = "INFO"
    sentry_dsn: Optional[str] = None

    @classmethod
    def from_env(cls) -> "SearchSettings":
        """Load settings from environment variables, falling back to the defaults."""

        settings = cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 4000),
            cache_ttl_s=_env_float("SEARCH_CACHE_TTL", 300.0),
            cache_max_entries=_env_int("SEARCH_CACHE_MAX_ENTRIES", 1000),
            result_limit=_env_int("SEARCH_RESULT_LIMIT", 10),
            fetch_timeout_s=_env_float("SEARCH_FETCH_TIMEOUT", 10.0),
            fetch_retries=_env_int("SEARCH_FETCH_RETRIES", 2),
            retry_backoff_s=_env_float("SEARCH_RETRY_BACKOFF", 0.5),
            snippet_limit=_env_int("SEARCH_SNIPPET_LIMIT", 300),
            isolate_failures=_env_bool("SEARCH_ISOLATE_FAILURES", False),
            concurrent=_env_bool("SEARCH_CONCURRENT", False),
            engines=_env_list("SEARCH_ENGINES", DEFAULT_ENGINES),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            sentry_dsn=os.getenv("SENTRY_DSN") or None,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Reject values that would make the service misbehave."""

        if not 0 < self.port < 65536:
            raise ConfigurationError(f"PORT out of range: {self.port}")
        if self.cache_ttl_s <= 0:
            raise ConfigurationError("SEARCH_CACHE_TTL must be positive")
        if self.cache_max_entries < 1:
            raise ConfigurationError("SEARCH_CACHE_MAX_ENTRIES must be at least 1")
        if self.result_limit < 1:
            raise ConfigurationError("SEARCH_RESULT_LIMIT must be at least 1")
        if self.fetch_retries < 0:
            raise ConfigurationError("SEARCH_FETCH_RETRIES cannot be negative")
        if self.fetch_timeout_s <= 0:
            raise ConfigurationError("SEARCH_FETCH_TIMEOUT must be positive")
        if not self.engines:
            raise ConfigurationError("SEARCH_ENGINES must name at least one engine")


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler; repeated calls are no-ops."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
