"""
Model package exports.

Import every SQLAlchemy model here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.audit import (
    ALLOWED_AUDIT_TRANSITIONS,
    TERMINAL_AUDIT_STATUSES,
    Audit,
    AuditStatus,
)

__all__ = [
    "ALLOWED_AUDIT_TRANSITIONS",
    "TERMINAL_AUDIT_STATUSES",
    "Audit",
    "AuditStatus",
]
