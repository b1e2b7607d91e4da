"""
Repository layer exports.
"""

from db.repositories.audit_repository import MAX_LIST_LIMIT, AuditRepository
from db.repositories.errors import AuditRepositoryError, InvalidAuditTransitionError

__all__ = [
    "MAX_LIST_LIMIT",
    "AuditRepository",
    "AuditRepositoryError",
    "InvalidAuditTransitionError",
]
