"""
app/providers/open_pagerank_provider.py

Open PageRank adapter for domain authority lookup.
"""

from __future__ import annotations

from typing import Any

import requests

from app.config import OpenPageRankSettings
from app.domain.audit import ProviderKind, ProviderResult
from app.domain.url_normalization import normalize_domain
from app.providers.base import BaseProvider, ProviderRequestError, as_number


class OpenPageRankProvider(BaseProvider):
    """
    Looks up the 0-10 page rank of one domain.
    """

    def __init__(
        self,
        *,
        settings: OpenPageRankSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            kind=ProviderKind.OPEN_PAGERANK,
            timeout_seconds=settings.timeout_seconds,
            session=session,
        )
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.api_key)

    def fetch(self, domain_or_url: str | None) -> ProviderResult:
        if not self._settings.api_key:
            return self._failure("OPEN_PAGERANK_API_KEY not set")
        domain = normalize_domain(domain_or_url)
        if domain is None:
            return self._failure("domain or url required")

        try:
            payload = self._request_json(
                url=self._settings.base_url,
                params={"domains[]": domain},
                headers={"API-OPR": self._settings.api_key},
            )
        except ProviderRequestError as exc:
            return self._failure(str(exc))

        return ProviderResult.success(self.normalize(payload, domain), raw=payload)

    @staticmethod
    def normalize(payload: Any, domain: str) -> dict[str, Any]:
        entries = payload.get("response") if isinstance(payload, dict) else None
        entry = entries[0] if isinstance(entries, list) and entries else {}
        if not isinstance(entry, dict):
            entry = {}

        # page_rank_decimal is the 0-10 figure; older payloads only carry rank.
        rank = as_number(entry.get("page_rank_decimal"))
        if rank is None:
            rank = as_number(entry.get("rank"))

        return {
            "domain": entry.get("domain") or domain,
            "rank": rank,
        }
