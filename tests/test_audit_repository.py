"""
tests/test_audit_repository.py

Lifecycle transitions and history queries against a SQLite audit store.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session, sessionmaker

from db.models.audit import AuditStatus, empty_scores
from db.repositories import AuditRepository, InvalidAuditTransitionError
from db.repositories.audit_repository import MAX_LIST_LIMIT


@pytest.fixture()
def db(session_factory: sessionmaker[Session]):
    with session_factory() as session:
        yield session


def _create(db: Session, target_url: str = "https://example.com") -> uuid.UUID:
    audit = AuditRepository(db).create_audit(target_url=target_url, domain="example.com")
    db.commit()
    return audit.id


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestCreateAudit:
    def test_new_audit_is_queued_with_empty_scores(self, db: Session) -> None:
        audit = AuditRepository(db).create_audit(
            target_url="https://example.com/a",
            domain="example.com",
            keyword="widgets",
        )
        db.commit()

        assert isinstance(audit.id, uuid.UUID)
        assert audit.status == AuditStatus.QUEUED
        assert audit.scores == empty_scores()
        assert audit.provider_data == {}
        assert audit.error is None
        assert audit.started_at is None
        assert audit.completed_at is None
        assert audit.created_at is not None

    def test_ids_are_unique(self, db: Session) -> None:
        first = _create(db)
        second = _create(db)
        assert first != second

    def test_get_unknown_audit_returns_none(self, db: Session) -> None:
        assert AuditRepository(db).get_audit(uuid.uuid4()) is None


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


class TestTransitions:
    def test_queued_running_done(self, db: Session) -> None:
        audit_id = _create(db)
        repository = AuditRepository(db)

        running = repository.mark_running(audit_id=audit_id)
        db.commit()
        assert running.status == AuditStatus.RUNNING
        assert running.started_at is not None

        scores = {"seo": 80, "rank": None, "domain_rank": 50, "social": 70, "overall": 65}
        done = repository.mark_done(
            audit_id=audit_id,
            scores=scores,
            provider_data={"pagespeed": {"ok": True}},
        )
        db.commit()

        assert done.status == AuditStatus.DONE
        assert done.scores == scores
        assert done.provider_data == {"pagespeed": {"ok": True}}
        assert done.completed_at is not None
        assert done.is_terminal is True

    def test_running_to_failed_records_error(self, db: Session) -> None:
        audit_id = _create(db)
        repository = AuditRepository(db)
        repository.mark_running(audit_id=audit_id)

        failed = repository.mark_failed(audit_id=audit_id, error="RuntimeError: boom")
        db.commit()

        assert failed.status == AuditStatus.FAILED
        assert failed.error == "RuntimeError: boom"
        assert failed.completed_at is not None

    def test_queued_to_failed_is_allowed(self, db: Session) -> None:
        audit_id = _create(db)
        failed = AuditRepository(db).mark_failed(audit_id=audit_id, error="Failed to schedule audit job.")
        assert failed.status == AuditStatus.FAILED

    def test_queued_cannot_jump_to_done(self, db: Session) -> None:
        audit_id = _create(db)
        with pytest.raises(InvalidAuditTransitionError) as exc_info:
            AuditRepository(db).mark_done(audit_id=audit_id, scores=empty_scores(), provider_data={})
        assert exc_info.value.current == AuditStatus.QUEUED
        assert exc_info.value.requested == AuditStatus.DONE

    @pytest.mark.parametrize("terminal", [AuditStatus.DONE, AuditStatus.FAILED])
    def test_terminal_states_have_no_exits(self, db: Session, terminal: str) -> None:
        audit_id = _create(db)
        repository = AuditRepository(db)
        repository.mark_running(audit_id=audit_id)
        if terminal == AuditStatus.DONE:
            repository.mark_done(audit_id=audit_id, scores=empty_scores(), provider_data={})
        else:
            repository.mark_failed(audit_id=audit_id, error="boom")
        db.commit()

        with pytest.raises(InvalidAuditTransitionError):
            repository.mark_running(audit_id=audit_id)
        with pytest.raises(InvalidAuditTransitionError):
            repository.mark_failed(audit_id=audit_id, error="again")

        assert repository.get_audit(audit_id).status == terminal

    def test_running_cannot_restart(self, db: Session) -> None:
        audit_id = _create(db)
        repository = AuditRepository(db)
        repository.mark_running(audit_id=audit_id)
        with pytest.raises(InvalidAuditTransitionError):
            repository.mark_running(audit_id=audit_id)

    def test_missing_audit_returns_none(self, db: Session) -> None:
        repository = AuditRepository(db)
        missing = uuid.uuid4()
        assert repository.mark_running(audit_id=missing) is None
        assert repository.mark_failed(audit_id=missing, error="x") is None


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class TestListAudits:
    def test_newest_first_and_filtered_by_target(self, db: Session) -> None:
        repository = AuditRepository(db)
        base_time = datetime(2026, 1, 1, tzinfo=timezone.utc)
        created = []
        for offset in range(3):
            audit = repository.create_audit(target_url="https://example.com")
            audit.created_at = base_time + timedelta(minutes=offset)
            created.append(audit.id)
        repository.create_audit(target_url="https://other.org")
        db.commit()

        audits = repository.list_audits_for_target(target_url="https://example.com")

        assert [audit.id for audit in audits] == list(reversed(created))

    def test_limit_is_applied(self, db: Session) -> None:
        for _ in range(4):
            _create(db)
        audits = AuditRepository(db).list_audits_for_target(target_url="https://example.com", limit=2)
        assert len(audits) == 2

    @pytest.mark.parametrize("limit", [0, -5])
    def test_non_positive_limit_returns_at_least_one(self, db: Session, limit: int) -> None:
        _create(db)
        _create(db)
        audits = AuditRepository(db).list_audits_for_target(target_url="https://example.com", limit=limit)
        assert len(audits) == 1

    def test_limit_is_capped(self, db: Session) -> None:
        repository = AuditRepository(db)
        for _ in range(MAX_LIST_LIMIT + 5):
            repository.create_audit(target_url="https://example.com")
        db.commit()

        audits = repository.list_audits_for_target(target_url="https://example.com", limit=10_000)

        assert len(audits) == MAX_LIST_LIMIT

    def test_unknown_target_is_empty(self, db: Session) -> None:
        assert AuditRepository(db).list_audits_for_target(target_url="https://nowhere.test") == []
