"""
app/services/audit_state_machine.py

Lifecycle of one audit record: queued -> running -> done | failed.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from sqlalchemy.orm import Session

from app.domain.audit import ScoreSet
from app.logging_utils import log_event
from app.queue.dispatcher import NonRetryableJobError
from app.services.fallback_generator import generate_social_score
from app.services.provider_fanout_service import ProviderFanoutResult, ProviderFanoutService
from app.services.score_aggregator import compute_scores
from db.models.audit import AuditStatus
from db.repositories.audit_repository import AuditRepository

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 2000


class AuditNotFoundError(NonRetryableJobError):
    """
    Raised when a delivered job references an audit that does not exist.
    """


class AuditProcessingFailedError(NonRetryableJobError):
    """
    Raised once an audit has been recorded as failed; the cause is chained.
    """


class AuditStateMachine:
    """
    Drives one audit from pickup to a terminal state.

    The running transition is committed before any provider is called, so
    pollers see ``running`` for the whole fan-out. On success scores and
    provider data are written together with ``done``; on any fault the record
    becomes ``failed`` with the cause and ``AuditProcessingFailedError`` is
    raised, which the dispatcher does not redeliver. Faults that leave the
    record unmarked propagate as-is. Done and running records are left
    untouched; a failed record is reported as failed again.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        fanout_service: ProviderFanoutService,
    ) -> None:
        self._session_factory = session_factory
        self._fanout_service = fanout_service

    def process(self, audit_id: uuid.UUID) -> None:
        with self._session_factory() as db:
            repository = AuditRepository(db)
            audit = repository.get_audit(audit_id)
            if audit is None:
                raise AuditNotFoundError(f"Audit not found: {audit_id}")

            if audit.status == AuditStatus.FAILED:
                raise AuditProcessingFailedError(f"Audit already failed: {audit_id}: {audit.error}")

            if audit.status != AuditStatus.QUEUED:
                # Redelivered or already owned by another consumer.
                log_event(
                    logger,
                    logging.INFO,
                    "audit_pickup_skipped",
                    audit_id=audit_id,
                    status=audit.status,
                )
                return

            try:
                repository.mark_running(audit_id=audit_id)
                db.commit()
                log_event(logger, logging.INFO, "audit_running", audit_id=audit_id)

                fanout = self._fanout_service.collect(
                    target_url=audit.target_url,
                    domain=audit.domain,
                    keyword=audit.keyword,
                )
                scores = self._score(fanout, seed=audit.domain or audit.target_url)

                repository.mark_done(
                    audit_id=audit_id,
                    scores=scores.to_payload(),
                    provider_data=fanout.to_payload(),
                )
                db.commit()
            except Exception as exc:
                if self._mark_failed(db=db, audit_id=audit_id, exc=exc):
                    raise AuditProcessingFailedError(f"{type(exc).__name__}: {exc}") from exc
                # Record still open; let the dispatcher redeliver.
                raise

            log_event(
                logger,
                logging.INFO,
                "audit_done",
                audit_id=audit_id,
                overall=scores.overall,
                fallbacks=[
                    kind
                    for kind, payload in fanout.to_payload().items()
                    if payload is not None and payload["fallback"]
                ],
            )

    def _score(self, fanout: ProviderFanoutResult, *, seed: str) -> ScoreSet:
        social = generate_social_score(seed) if self._fanout_service.fallback_enabled else None
        return compute_scores(
            pagespeed=fanout.pagespeed,
            open_pagerank=fanout.open_pagerank,
            serp=fanout.serp,
            social=social,
        )

    def _mark_failed(self, *, db: Session, audit_id: uuid.UUID, exc: Exception) -> bool:
        repository = AuditRepository(db)
        error_message = f"{type(exc).__name__}: {exc}"
        logger.exception("Audit processing failed id=%s error=%s", audit_id, error_message)
        try:
            db.rollback()
            failed_audit = repository.mark_failed(
                audit_id=audit_id,
                error=error_message[:MAX_ERROR_LENGTH],
            )
            if failed_audit is None:
                logger.error("Unable to mark audit as failed because it was not found id=%s", audit_id)
                return False
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to persist failed audit state id=%s", audit_id)
            return False
        return True
