"""
Repository-layer exceptions for audit persistence.
"""

from __future__ import annotations


class AuditRepositoryError(Exception):
    """Base exception for audit repository failures."""


class InvalidAuditTransitionError(AuditRepositoryError):
    """Raised when a status change would break the audit lifecycle."""

    def __init__(self, *, audit_id: object, current: str, requested: str) -> None:
        self.audit_id = audit_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Audit {audit_id} cannot move from '{current}' to '{requested}'."
        )
