"""
Shared fixtures: a throwaway SQLite audit store and a scripted HTTP session.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Any

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import (
    AuditPipelineSettings,
    AuditQueueSettings,
    OpenPageRankSettings,
    PageSpeedSettings,
    SerpAPISettings,
)
from db.base import Base
from db.models import Audit  # noqa: F401
from db.session import build_session_factory

PAGESPEED_URL = "https://pagespeed.test/run"
OPEN_PAGERANK_URL = "https://openpagerank.test/rank"
SERPAPI_URL = "https://serpapi.test/search"


class FakeResponse:
    def __init__(
        self,
        payload: Any = None,
        *,
        status_code: int = 200,
        invalid_json: bool = False,
    ) -> None:
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeHTTPSession:
    """
    Stand-in for ``requests.Session`` that answers per URL.

    Each URL maps to a list of responses (or exceptions to raise) consumed in
    order; the last entry repeats once the list is exhausted.
    """

    def __init__(self, routes: dict[str, list[Any]] | None = None) -> None:
        self._routes = {url: list(items) for url, items in (routes or {}).items()}
        self._lock = threading.Lock()
        self.calls: list[dict[str, Any]] = []

    def request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> FakeResponse:
        with self._lock:
            self.calls.append(
                {"method": method, "url": url, "params": params, "headers": headers, "timeout": timeout}
            )
            items = self._routes.get(url)
            if not items:
                raise requests.ConnectionError(f"No route for {url}")
            item = items.pop(0) if len(items) > 1 else items[0]
        if isinstance(item, Exception):
            raise item
        return item

    def calls_to(self, url: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]


@pytest.fixture()
def engine(tmp_path) -> Iterator[Engine]:
    db_engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'audits.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return build_session_factory(engine)


@pytest.fixture()
def pagespeed_settings() -> PageSpeedSettings:
    return PageSpeedSettings(api_key="ps-key", base_url=PAGESPEED_URL)


@pytest.fixture()
def open_pagerank_settings() -> OpenPageRankSettings:
    return OpenPageRankSettings(api_key="opr-key", base_url=OPEN_PAGERANK_URL)


@pytest.fixture()
def serpapi_settings() -> SerpAPISettings:
    return SerpAPISettings(api_key="serp-key", base_url=SERPAPI_URL)


@pytest.fixture()
def keyless_provider_settings() -> dict[str, Any]:
    return {
        "pagespeed_settings": PageSpeedSettings(api_key=None, base_url=PAGESPEED_URL),
        "open_pagerank_settings": OpenPageRankSettings(api_key=None, base_url=OPEN_PAGERANK_URL),
        "serpapi_settings": SerpAPISettings(api_key=None, base_url=SERPAPI_URL),
    }


@pytest.fixture()
def pipeline_settings() -> AuditPipelineSettings:
    return AuditPipelineSettings(fallback_enabled=True, provider_retries=2, provider_backoff_ms=2000)


@pytest.fixture()
def queue_settings() -> AuditQueueSettings:
    return AuditQueueSettings(enabled=True, consumers=1, max_delivery_attempts=2, delivery_backoff_seconds=0.0)


@pytest.fixture()
def recorded_sleeps() -> list[float]:
    return []


@pytest.fixture()
def fake_sleep(recorded_sleeps: list[float]):
    def _sleep(seconds: float) -> None:
        recorded_sleeps.append(seconds)

    return _sleep


def pagespeed_payload(
    *,
    score: float | None = 0.8,
    cls: float | None = None,
    tbt_ms: float | None = None,
    fcp_ms: float | None = 1200.0,
    lcp_ms: float | None = 2400.0,
) -> dict[str, Any]:
    audits: dict[str, Any] = {}
    for audit_id, value in (
        ("first-contentful-paint", fcp_ms),
        ("largest-contentful-paint", lcp_ms),
        ("total-blocking-time", tbt_ms),
        ("cumulative-layout-shift", cls),
    ):
        if value is not None:
            audits[audit_id] = {"numericValue": value}
    categories = {"performance": {"score": score}} if score is not None else {}
    return {"lighthouseResult": {"categories": categories, "audits": audits}}


def serp_payload(links: list[str]) -> dict[str, Any]:
    return {
        "organic_results": [
            {"position": index, "link": link, "displayed_link": link}
            for index, link in enumerate(links, start=1)
        ]
    }
