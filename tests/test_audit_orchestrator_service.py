"""
tests/test_audit_orchestrator_service.py

Submission, scheduling failures, history lookups and provider checks.
"""

from __future__ import annotations

import uuid

import pytest
from conftest import OPEN_PAGERANK_URL, PAGESPEED_URL, FakeHTTPSession, FakeResponse, pagespeed_payload
from sqlalchemy import func, select

from app.config import AuditQueueSettings
from app.domain.audit import ProviderKind
from app.queue import DispatcherClosedError
from app.services.audit_runtime import build_audit_runtime
from app.validators import AuditRequestValidationError
from db.models.audit import Audit, AuditStatus


@pytest.fixture()
def runtime(session_factory, keyless_provider_settings, pipeline_settings, queue_settings, fake_sleep):
    return build_audit_runtime(
        session_factory=session_factory,
        pipeline_settings=pipeline_settings,
        queue_settings=queue_settings,
        http_session=FakeHTTPSession(),
        sleep=fake_sleep,
        **keyless_provider_settings,
    )


def _audit_count(session_factory) -> int:
    with session_factory() as db:
        return db.scalar(select(func.count()).select_from(Audit))


class TestSubmitAudit:
    def test_submission_is_queued_and_dispatched(self, runtime, session_factory) -> None:
        with session_factory() as db:
            audit = runtime.orchestrator.submit_audit(db=db, url="https://www.Example.com/page")

        assert audit.status == AuditStatus.QUEUED
        assert audit.domain == "example.com"
        assert runtime.dispatcher.pending_jobs == 1

        outcome = runtime.dispatcher.process_next()

        assert outcome.audit_id == audit.id
        assert outcome.succeeded is True
        with session_factory() as db:
            assert runtime.orchestrator.get_audit(db=db, audit_id=audit.id).status == AuditStatus.DONE

    def test_empty_url_is_rejected_before_any_record(self, runtime, session_factory) -> None:
        with session_factory() as db:
            with pytest.raises(AuditRequestValidationError):
                runtime.orchestrator.submit_audit(db=db, url="")

        assert _audit_count(session_factory) == 0
        assert runtime.dispatcher.pending_jobs == 0

    def test_scheduling_failure_marks_audit_failed(self, runtime, session_factory) -> None:
        runtime.dispatcher.stop()

        with session_factory() as db:
            with pytest.raises(DispatcherClosedError):
                runtime.orchestrator.submit_audit(db=db, url="https://example.com")

        with session_factory() as db:
            audit = db.scalars(select(Audit)).one()
        assert audit.status == AuditStatus.FAILED
        assert audit.error == "Failed to schedule audit job."

    def test_disabled_queue_leaves_audit_queued(
        self,
        session_factory,
        keyless_provider_settings,
        pipeline_settings,
        fake_sleep,
    ) -> None:
        runtime = build_audit_runtime(
            session_factory=session_factory,
            pipeline_settings=pipeline_settings,
            queue_settings=AuditQueueSettings(enabled=False),
            http_session=FakeHTTPSession(),
            sleep=fake_sleep,
            **keyless_provider_settings,
        )

        with session_factory() as db:
            audit = runtime.orchestrator.submit_audit(db=db, url="https://example.com")

        assert audit.status == AuditStatus.QUEUED
        assert runtime.dispatcher.pending_jobs == 0


class TestLookups:
    def test_unknown_audit_is_none(self, runtime, session_factory) -> None:
        with session_factory() as db:
            assert runtime.orchestrator.get_audit(db=db, audit_id=uuid.uuid4()) is None

    def test_list_audits_for_target(self, runtime, session_factory) -> None:
        with session_factory() as db:
            for _ in range(3):
                runtime.orchestrator.submit_audit(db=db, url="https://example.com")
            runtime.orchestrator.submit_audit(db=db, url="https://other.org")

        with session_factory() as db:
            audits = runtime.orchestrator.list_audits(db=db, target_url="https://example.com", limit=2)

        assert len(audits) == 2
        assert {audit.target_url for audit in audits} == {"https://example.com"}


class TestProviders:
    def test_health_reports_configured_keys(
        self,
        session_factory,
        pagespeed_settings,
        keyless_provider_settings,
        pipeline_settings,
        queue_settings,
    ) -> None:
        provider_settings = {**keyless_provider_settings, "pagespeed_settings": pagespeed_settings}
        runtime = build_audit_runtime(
            session_factory=session_factory,
            pipeline_settings=pipeline_settings,
            queue_settings=queue_settings,
            http_session=FakeHTTPSession(),
            **provider_settings,
        )

        assert runtime.orchestrator.provider_health() == {
            ProviderKind.PAGESPEED: True,
            ProviderKind.OPEN_PAGERANK: False,
            ProviderKind.SERP: False,
        }

    def test_demo_calls_once_without_fallback(
        self,
        session_factory,
        pagespeed_settings,
        open_pagerank_settings,
        serpapi_settings,
        pipeline_settings,
        queue_settings,
    ) -> None:
        http_session = FakeHTTPSession(
            {
                PAGESPEED_URL: [FakeResponse(pagespeed_payload(score=0.75))],
                OPEN_PAGERANK_URL: [FakeResponse({}, status_code=500)],
            }
        )
        runtime = build_audit_runtime(
            session_factory=session_factory,
            pipeline_settings=pipeline_settings,
            queue_settings=queue_settings,
            pagespeed_settings=pagespeed_settings,
            open_pagerank_settings=open_pagerank_settings,
            serpapi_settings=serpapi_settings,
            http_session=http_session,
        )

        result = runtime.orchestrator.run_provider_demo(url="https://example.com")

        assert result["domain"] == "example.com"
        assert result["providers"][ProviderKind.PAGESPEED]["normalized"]["performance"] == 75
        assert result["providers"][ProviderKind.OPEN_PAGERANK]["ok"] is False
        assert result["providers"][ProviderKind.SERP] is None
        assert result["scores"]["seo"] == 75
        assert result["scores"]["domain_rank"] is None
        assert result["scores"]["overall"] == 75
        assert len(http_session.calls_to(OPEN_PAGERANK_URL)) == 1
        assert _audit_count(session_factory) == 0

    def test_demo_requires_url(self, runtime) -> None:
        with pytest.raises(AuditRequestValidationError):
            runtime.orchestrator.run_provider_demo(url=None)
