"""
Orchestrator service for audit submission, job dispatch and status lookup.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from sqlalchemy.orm import Session

from app.domain.audit import ProviderKind, ProviderResult
from app.providers import OpenPageRankProvider, PageSpeedProvider, SerpAPIProvider
from app.queue.dispatcher import AuditJobDispatcher
from app.services.score_aggregator import compute_scores
from app.validators.audit_request_validator import validate_audit_request
from db.models.audit import Audit
from db.repositories.audit_repository import AuditRepository

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20


class AuditOrchestratorService:
    """
    Coordinates audit creation, job dispatch, and history queries.
    """

    def __init__(
        self,
        *,
        pagespeed: PageSpeedProvider,
        open_pagerank: OpenPageRankProvider,
        serpapi: SerpAPIProvider,
        dispatcher: AuditJobDispatcher | None = None,
    ) -> None:
        self._pagespeed = pagespeed
        self._open_pagerank = open_pagerank
        self._serpapi = serpapi
        self._dispatcher = dispatcher

    def submit_audit(
        self,
        *,
        db: Session,
        url: str | None,
        domain: str | None = None,
        keyword: str | None = None,
    ) -> Audit:
        submission = validate_audit_request(url=url, domain=domain, keyword=keyword)

        repository = AuditRepository(db)
        audit = repository.create_audit(
            target_url=submission.target_url,
            domain=submission.domain,
            keyword=submission.keyword,
        )
        db.commit()

        if self._dispatcher is None:
            logger.warning("Audit dispatcher not configured; audit left queued id=%s", audit.id)
            return audit

        try:
            self._dispatcher.submit(audit.id)
        except Exception:
            logger.exception("Failed to schedule audit job id=%s", audit.id)
            repository.mark_failed(audit_id=audit.id, error="Failed to schedule audit job.")
            db.commit()
            raise

        return audit

    def get_audit(self, *, db: Session, audit_id: uuid.UUID) -> Audit | None:
        return AuditRepository(db).get_audit(audit_id)

    def list_audits(
        self,
        *,
        db: Session,
        target_url: str,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[Audit]:
        return AuditRepository(db).list_audits_for_target(target_url=target_url, limit=limit)

    def provider_health(self) -> dict[str, bool]:
        return {
            ProviderKind.PAGESPEED: self._pagespeed.is_configured,
            ProviderKind.OPEN_PAGERANK: self._open_pagerank.is_configured,
            ProviderKind.SERP: self._serpapi.is_configured,
        }

    def run_provider_demo(
        self,
        *,
        url: str | None,
        domain: str | None = None,
        keyword: str | None = None,
    ) -> dict[str, Any]:
        """
        Call each provider once, without retry or fallback, and score the result.
        """

        submission = validate_audit_request(url=url, domain=domain, keyword=keyword)

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="provider-demo") as pool:
            pagespeed_future = pool.submit(self._pagespeed.fetch, submission.target_url)
            open_pagerank_future = pool.submit(self._open_pagerank.fetch, submission.domain)
            serp_future = (
                pool.submit(self._serpapi.fetch, submission.keyword, submission.domain)
                if submission.keyword and submission.domain
                else None
            )
            pagespeed = pagespeed_future.result()
            open_pagerank = open_pagerank_future.result()
            serp: ProviderResult | None = serp_future.result() if serp_future else None

        scores = compute_scores(pagespeed=pagespeed, open_pagerank=open_pagerank, serp=serp)
        return {
            "providers": {
                ProviderKind.PAGESPEED: pagespeed.to_payload(),
                ProviderKind.OPEN_PAGERANK: open_pagerank.to_payload(),
                ProviderKind.SERP: serp.to_payload() if serp is not None else None,
            },
            "scores": scores.to_payload(),
            "domain": submission.domain,
        }
