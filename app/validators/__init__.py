"""
app/validators package marker.
"""

from app.validators.audit_request_validator import (
    AuditRequestValidationError,
    validate_audit_request,
)

__all__ = [
    "AuditRequestValidationError",
    "validate_audit_request",
]
