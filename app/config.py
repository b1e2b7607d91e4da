"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class PageSpeedSettings:
    """
    PageSpeed Insights (performance) provider settings.
    """

    api_key: str | None = None
    base_url: str = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
    strategy: str = "mobile"
    # Lighthouse runs server-side; heavy pages need the longer budget.
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class OpenPageRankSettings:
    """
    Open PageRank (domain authority) provider settings.
    """

    api_key: str | None = None
    base_url: str = "https://openpagerank.com/api/v1.0/getPageRank"
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class SerpAPISettings:
    """
    SerpAPI (search result position) provider settings.
    """

    api_key: str | None = None
    base_url: str = "https://serpapi.com/search.json"
    hl: str = "en"
    gl: str = "us"
    num_results: int = 50
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class AuditPipelineSettings:
    """
    Per-provider retry and fallback behaviour for audit processing.
    """

    fallback_enabled: bool = True
    provider_retries: int = 2
    provider_backoff_ms: int = 2000


@dataclass(frozen=True)
class AuditQueueSettings:
    """
    In-process audit job queue settings.
    """

    enabled: bool = True
    consumers: int = 1
    max_delivery_attempts: int = 2
    delivery_backoff_seconds: float = 5.0


@lru_cache(maxsize=1)
def get_pagespeed_settings() -> PageSpeedSettings:
    """
    Return PageSpeed provider settings from environment variables.
    """

    return PageSpeedSettings(
        api_key=_get_optional_str_env("PAGESPEED_API_KEY"),
        base_url=_get_str_env(
            "PAGESPEED_BASE_URL",
            "https://www.googleapis.com/pagespeedonline/v5/runPagespeed",
        ),
        strategy=_get_str_env("PAGESPEED_STRATEGY", "mobile"),
        timeout_seconds=max(1.0, _get_float_env("PAGESPEED_TIMEOUT_SECONDS", 30.0)),
    )


@lru_cache(maxsize=1)
def get_open_pagerank_settings() -> OpenPageRankSettings:
    """
    Return Open PageRank provider settings from environment variables.
    """

    return OpenPageRankSettings(
        api_key=_get_optional_str_env("OPEN_PAGERANK_API_KEY"),
        base_url=_get_str_env(
            "OPEN_PAGERANK_BASE_URL",
            "https://openpagerank.com/api/v1.0/getPageRank",
        ),
        timeout_seconds=max(1.0, _get_float_env("OPEN_PAGERANK_TIMEOUT_SECONDS", 15.0)),
    )


@lru_cache(maxsize=1)
def get_serpapi_settings() -> SerpAPISettings:
    """
    Return SerpAPI provider settings from environment variables.
    """

    return SerpAPISettings(
        api_key=_get_optional_str_env("SERPAPI_KEY"),
        base_url=_get_str_env("SERPAPI_BASE_URL", "https://serpapi.com/search.json"),
        hl=_get_str_env("SERPAPI_HL", "en"),
        gl=_get_str_env("SERPAPI_GL", "us"),
        num_results=min(100, max(1, _get_int_env("SERPAPI_NUM_RESULTS", 50))),
        timeout_seconds=max(1.0, _get_float_env("SERPAPI_TIMEOUT_SECONDS", 15.0)),
    )


@lru_cache(maxsize=1)
def get_audit_pipeline_settings() -> AuditPipelineSettings:
    """
    Return retry/fallback settings for audit processing.
    """

    return AuditPipelineSettings(
        fallback_enabled=_get_bool_env("FALLBACK_ENABLED", True),
        provider_retries=max(0, _get_int_env("PROVIDER_RETRIES", 2)),
        provider_backoff_ms=max(0, _get_int_env("PROVIDER_BACKOFF_MS", 2000)),
    )


@lru_cache(maxsize=1)
def get_audit_queue_settings() -> AuditQueueSettings:
    """
    Return audit job queue settings.
    """

    return AuditQueueSettings(
        enabled=_get_bool_env("AUDIT_QUEUE_ENABLED", True),
        consumers=max(1, _get_int_env("AUDIT_QUEUE_CONSUMERS", 1)),
        max_delivery_attempts=max(1, _get_int_env("AUDIT_JOB_MAX_ATTEMPTS", 2)),
        delivery_backoff_seconds=max(0.0, _get_float_env("AUDIT_JOB_BACKOFF_SECONDS", 5.0)),
    )
