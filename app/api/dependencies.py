"""
app/api/dependencies.py

Shared FastAPI dependencies for the audit routes.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.services.audit_orchestrator_service import AuditOrchestratorService
from app.services.audit_runtime import AuditRuntime


def get_audit_runtime(request: Request) -> AuditRuntime:
    """
    Return the runtime built by the app factory.
    """

    runtime = getattr(request.app.state, "audit_runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Audit runtime is not initialised.",
        )
    return runtime


def get_audit_orchestrator(request: Request) -> AuditOrchestratorService:
    return get_audit_runtime(request).orchestrator
