"""
db/models/audit.py

Audit record model tracking one page-quality evaluation through its lifecycle.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument, TimestampMixin


class AuditStatus:
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


TERMINAL_AUDIT_STATUSES: frozenset[str] = frozenset({AuditStatus.DONE, AuditStatus.FAILED})

# queued -> failed covers a job that could not be scheduled at all.
# running may settle exactly once; terminal states have no exits.
ALLOWED_AUDIT_TRANSITIONS: dict[str, frozenset[str]] = {
    AuditStatus.QUEUED: frozenset({AuditStatus.RUNNING, AuditStatus.FAILED}),
    AuditStatus.RUNNING: frozenset({AuditStatus.DONE, AuditStatus.FAILED}),
    AuditStatus.DONE: frozenset(),
    AuditStatus.FAILED: frozenset(),
}


def empty_scores() -> dict[str, int | None]:
    return {
        "seo": None,
        "rank": None,
        "domain_rank": None,
        "social": None,
        "overall": None,
    }


class Audit(Base, TimestampMixin):
    __tablename__ = "audits"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    target_url: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
    )
    domain: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Hostname without scheme or leading www.",
    )
    keyword: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AuditStatus.QUEUED,
        comment="queued, running, done, failed",
    )
    error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    scores: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=empty_scores,
    )
    provider_data: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=dict,
        comment="Per-provider result envelopes kept for debugging",
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_audits_status", "status"),
        Index("ix_audits_created_at", "created_at"),
        Index("ix_audits_target_url_created_at", "target_url", "created_at"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_AUDIT_STATUSES
