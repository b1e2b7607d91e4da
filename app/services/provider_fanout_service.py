"""
app/services/provider_fanout_service.py

Concurrent per-audit provider fetching with retry and fallback.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from app.config import AuditPipelineSettings
from app.domain.audit import ProviderKind, ProviderResult
from app.logging_utils import log_event
from app.providers import OpenPageRankProvider, PageSpeedProvider, SerpAPIProvider
from app.services.fallback_generator import generate_fallback, generate_serp_fallback
from app.services.retry_policy import ProviderRetryExhaustedError, with_retries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderFanoutResult:
    """
    Settled results of one audit's provider calls.

    ``serp`` is None when the search-rank call was skipped.
    """

    pagespeed: ProviderResult
    open_pagerank: ProviderResult
    serp: ProviderResult | None

    def to_payload(self) -> dict[str, Any]:
        return {
            ProviderKind.PAGESPEED: self.pagespeed.to_payload(),
            ProviderKind.OPEN_PAGERANK: self.open_pagerank.to_payload(),
            ProviderKind.SERP: self.serp.to_payload() if self.serp is not None else None,
        }


class ProviderFanoutService:
    """
    Runs the three provider adapters concurrently for one audit.

    Each call is wrapped in the retry policy; when all attempts fail the
    result is either a deterministic fallback or a failure envelope,
    depending on ``fallback_enabled``. ``collect`` never raises for
    provider-level failures.
    """

    def __init__(
        self,
        *,
        pagespeed: PageSpeedProvider,
        open_pagerank: OpenPageRankProvider,
        serpapi: SerpAPIProvider,
        settings: AuditPipelineSettings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._pagespeed = pagespeed
        self._open_pagerank = open_pagerank
        self._serpapi = serpapi
        self._settings = settings
        self._sleep = sleep

    @property
    def fallback_enabled(self) -> bool:
        return self._settings.fallback_enabled

    def collect(
        self,
        *,
        target_url: str,
        domain: str | None,
        keyword: str | None,
    ) -> ProviderFanoutResult:
        domain_subject = domain or target_url
        run_serp = bool(keyword and domain)

        # The pool lives only for this call, so no fetch outlives the job.
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="audit-provider") as pool:
            pagespeed_future = pool.submit(
                self._fetch_with_policy,
                ProviderKind.PAGESPEED,
                lambda: self._pagespeed.fetch(target_url),
                lambda: generate_fallback(ProviderKind.PAGESPEED, target_url),
            )
            open_pagerank_future = pool.submit(
                self._fetch_with_policy,
                ProviderKind.OPEN_PAGERANK,
                lambda: self._open_pagerank.fetch(domain_subject),
                lambda: generate_fallback(ProviderKind.OPEN_PAGERANK, domain_subject),
            )
            serp_future: Future[ProviderResult] | None = None
            if run_serp:
                serp_future = pool.submit(
                    self._fetch_with_policy,
                    ProviderKind.SERP,
                    lambda: self._serpapi.fetch(keyword, domain),
                    lambda: generate_serp_fallback(keyword, domain),
                )

            pagespeed_result = pagespeed_future.result()
            open_pagerank_result = open_pagerank_future.result()
            serp_result = serp_future.result() if serp_future is not None else None

        if (
            serp_result is not None
            and serp_result.ok
            and serp_result.field("rank") is None
            and self.fallback_enabled
        ):
            # Found nowhere in the top results: rank the same as a failed lookup.
            log_event(
                logger,
                logging.INFO,
                "provider_fallback_used",
                provider=ProviderKind.SERP,
                reason="domain not found in results",
            )
            serp_result = generate_serp_fallback(keyword, domain)

        return ProviderFanoutResult(
            pagespeed=pagespeed_result,
            open_pagerank=open_pagerank_result,
            serp=serp_result,
        )

    def _fetch_with_policy(
        self,
        kind: str,
        call: Callable[[], ProviderResult],
        fallback: Callable[[], ProviderResult],
    ) -> ProviderResult:
        try:
            return with_retries(
                call,
                self._settings.provider_retries,
                self._settings.provider_backoff_ms,
                sleep=self._sleep,
                label=kind,
            )
        except ProviderRetryExhaustedError as exc:
            if not self.fallback_enabled:
                return ProviderResult.failure(exc.last_error)
            log_event(
                logger,
                logging.INFO,
                "provider_fallback_used",
                provider=kind,
                attempts=exc.attempts,
                reason=exc.last_error,
            )
            return fallback()
