"""
app/providers/serpapi_provider.py

SerpAPI adapter for locating a domain in Google organic results.
"""

from __future__ import annotations

from typing import Any

import requests

from app.config import SerpAPISettings
from app.domain.audit import ProviderKind, ProviderResult
from app.domain.url_normalization import strip_scheme_and_www
from app.providers.base import BaseProvider, ProviderRequestError

MAX_SERP_RANK = 50


def find_domain_rank(organic_results: Any, domain: str, *, limit: int = MAX_SERP_RANK) -> int | None:
    """
    Return the 1-based position of the first result linking to ``domain``.

    Only the first ``limit`` results are scanned. A result matches when its
    ``link`` or ``displayed_link`` contains the domain, ignoring case, scheme
    and a leading ``www.``.
    """

    if not isinstance(organic_results, list):
        return None

    needle = strip_scheme_and_www(domain)
    if not needle:
        return None

    for position, result in enumerate(organic_results[:limit], start=1):
        if not isinstance(result, dict):
            continue
        for key in ("link", "displayed_link"):
            candidate = result.get(key)
            if isinstance(candidate, str) and needle in strip_scheme_and_www(candidate):
                return position
    return None


class SerpAPIProvider(BaseProvider):
    """
    Searches Google through SerpAPI and reports where the domain ranks.
    """

    def __init__(
        self,
        *,
        settings: SerpAPISettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            kind=ProviderKind.SERP,
            timeout_seconds=settings.timeout_seconds,
            session=session,
        )
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.api_key)

    def fetch(self, keyword: str | None, domain: str | None) -> ProviderResult:
        if not self._settings.api_key:
            return self._failure("SERPAPI_KEY not set")
        keyword = (keyword or "").strip()
        domain = (domain or "").strip()
        if not keyword or not domain:
            return self._failure("keyword and domain required")

        try:
            payload = self._request_json(
                url=self._settings.base_url,
                params={
                    "engine": "google",
                    "q": keyword,
                    "num": self._settings.num_results,
                    "hl": self._settings.hl,
                    "gl": self._settings.gl,
                    "api_key": self._settings.api_key,
                },
            )
        except ProviderRequestError as exc:
            return self._failure(str(exc))

        organic = payload.get("organic_results") if isinstance(payload, dict) else None
        return ProviderResult.success(
            {
                "keyword": keyword,
                "domain": domain,
                "rank": find_domain_rank(organic, domain),
            },
            raw=payload,
        )
