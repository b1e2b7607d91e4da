"""
Repository for audit lifecycle persistence and history lookup.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.base import utcnow
from db.models.audit import ALLOWED_AUDIT_TRANSITIONS, Audit, AuditStatus, empty_scores
from db.repositories.errors import InvalidAuditTransitionError

MAX_LIST_LIMIT = 200


class AuditRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_audit(
        self,
        *,
        target_url: str,
        domain: str | None = None,
        keyword: str | None = None,
    ) -> Audit:
        audit = Audit(
            target_url=target_url,
            domain=domain,
            keyword=keyword,
            status=AuditStatus.QUEUED,
            scores=empty_scores(),
            provider_data={},
        )
        self._session.add(audit)
        self._session.flush()
        self._session.refresh(audit)
        return audit

    def get_audit(self, audit_id: uuid.UUID) -> Audit | None:
        return self._session.get(Audit, audit_id)

    def list_audits_for_target(self, *, target_url: str, limit: int = 20) -> list[Audit]:
        bounded_limit = max(1, min(MAX_LIST_LIMIT, limit))
        stmt: Select[tuple[Audit]] = (
            select(Audit)
            .where(Audit.target_url == target_url)
            .order_by(Audit.created_at.desc())
            .limit(bounded_limit)
        )
        return list(self._session.scalars(stmt).all())

    def mark_running(self, *, audit_id: uuid.UUID) -> Audit | None:
        audit = self.get_audit(audit_id)
        if audit is None:
            return None
        self._transition(audit, AuditStatus.RUNNING)
        audit.started_at = utcnow()
        return audit

    def mark_done(
        self,
        *,
        audit_id: uuid.UUID,
        scores: dict[str, Any],
        provider_data: dict[str, Any],
    ) -> Audit | None:
        audit = self.get_audit(audit_id)
        if audit is None:
            return None
        self._transition(audit, AuditStatus.DONE)
        audit.scores = scores
        audit.provider_data = provider_data
        audit.error = None
        audit.completed_at = utcnow()
        return audit

    def mark_failed(self, *, audit_id: uuid.UUID, error: str) -> Audit | None:
        audit = self.get_audit(audit_id)
        if audit is None:
            return None
        self._transition(audit, AuditStatus.FAILED)
        audit.error = error
        audit.completed_at = utcnow()
        return audit

    @staticmethod
    def _transition(audit: Audit, target: str) -> None:
        allowed = ALLOWED_AUDIT_TRANSITIONS.get(audit.status, frozenset())
        if target not in allowed:
            raise InvalidAuditTransitionError(
                audit_id=audit.id,
                current=audit.status,
                requested=target,
            )
        audit.status = target
