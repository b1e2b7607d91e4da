"""
Provider configuration and one-shot demo endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_audit_orchestrator
from app.schemas.audits import AuditScoresResponse, ProviderDemoResponse, ProviderHealthResponse
from app.services.audit_orchestrator_service import AuditOrchestratorService
from app.validators.audit_request_validator import AuditRequestValidationError

router = APIRouter(prefix="/api", tags=["providers"])


@router.get("/providers/health", response_model=ProviderHealthResponse)
def provider_health(
    orchestrator: AuditOrchestratorService = Depends(get_audit_orchestrator),
) -> ProviderHealthResponse:
    return ProviderHealthResponse(providers_configured=orchestrator.provider_health())


@router.get("/providers-demo", response_model=ProviderDemoResponse)
def provider_demo(
    url: str = Query(default="", description="Page to evaluate"),
    domain: str | None = Query(default=None, description="Optional domain override"),
    keyword: str | None = Query(default=None, description="Optional search keyword"),
    orchestrator: AuditOrchestratorService = Depends(get_audit_orchestrator),
) -> ProviderDemoResponse:
    """
    Call every provider once without retry or fallback and score the result.
    """

    try:
        result = orchestrator.run_provider_demo(url=url, domain=domain, keyword=keyword)
    except AuditRequestValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return ProviderDemoResponse(
        providers=result["providers"],
        scores=AuditScoresResponse(**result["scores"]),
        domain=result["domain"],
    )
