"""
app/providers/pagespeed_provider.py

PageSpeed Insights adapter for Lighthouse performance metrics.
"""

from __future__ import annotations

import math
from typing import Any

import requests

from app.config import PageSpeedSettings
from app.domain.audit import ProviderKind, ProviderResult
from app.providers.base import BaseProvider, ProviderRequestError, as_number, dig

_METRIC_AUDITS: dict[str, str] = {
    "fcp_ms": "first-contentful-paint",
    "lcp_ms": "largest-contentful-paint",
    "tbt_ms": "total-blocking-time",
    "cls": "cumulative-layout-shift",
}


class PageSpeedProvider(BaseProvider):
    """
    Fetches a Lighthouse run for one URL and keeps the performance score
    plus the paint, blocking-time and layout-shift metrics.
    """

    def __init__(
        self,
        *,
        settings: PageSpeedSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            kind=ProviderKind.PAGESPEED,
            timeout_seconds=settings.timeout_seconds,
            session=session,
        )
        self._settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.api_key)

    def fetch(self, url: str | None) -> ProviderResult:
        if not self._settings.api_key:
            return self._failure("PAGESPEED_API_KEY not set")
        target = (url or "").strip()
        if not target:
            return self._failure("url required")

        try:
            payload = self._request_json(
                url=self._settings.base_url,
                params={
                    "url": target,
                    "strategy": self._settings.strategy,
                    "key": self._settings.api_key,
                },
            )
        except ProviderRequestError as exc:
            return self._failure(str(exc))

        return ProviderResult.success(self.normalize(payload), raw=payload)

    @staticmethod
    def normalize(payload: Any) -> dict[str, Any]:
        lighthouse = dig(payload, "lighthouseResult")
        performance_score = as_number(dig(lighthouse, "categories", "performance", "score"))

        normalized: dict[str, Any] = {
            "performance": (
                math.floor(performance_score * 100 + 0.5) if performance_score is not None else None
            ),
        }
        for field_name, audit_id in _METRIC_AUDITS.items():
            normalized[field_name] = as_number(dig(lighthouse, "audits", audit_id, "numericValue"))
        return normalized
