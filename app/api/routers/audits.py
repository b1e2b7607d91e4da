"""
Audit submission, status and history endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_audit_orchestrator
from app.schemas.audits import (
    AuditAcceptedResponse,
    AuditCreateRequest,
    AuditDetailResponse,
    AuditListResponse,
    AuditScoresResponse,
    AuditSummaryResponse,
)
from app.services.audit_orchestrator_service import DEFAULT_LIST_LIMIT, AuditOrchestratorService
from app.validators.audit_request_validator import AuditRequestValidationError
from db.models.audit import Audit
from db.repositories.audit_repository import MAX_LIST_LIMIT
from db.session import get_db

router = APIRouter(prefix="/api/audits", tags=["audits"])


@router.post(
    "",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=AuditAcceptedResponse,
)
def create_audit(
    payload: AuditCreateRequest,
    db: Session = Depends(get_db),
    orchestrator: AuditOrchestratorService = Depends(get_audit_orchestrator),
) -> AuditAcceptedResponse:
    try:
        audit = orchestrator.submit_audit(
            db=db,
            url=payload.url,
            domain=payload.domain,
            keyword=payload.keyword,
        )
    except AuditRequestValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return AuditAcceptedResponse(audit_id=audit.id, status=audit.status)


@router.get("", response_model=AuditListResponse)
def list_audits(
    target_url: str = Query(..., min_length=1, description="Audited URL to list history for"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, description=f"Max audits returned (capped at {MAX_LIST_LIMIT})"),
    db: Session = Depends(get_db),
    orchestrator: AuditOrchestratorService = Depends(get_audit_orchestrator),
) -> AuditListResponse:
    audits = orchestrator.list_audits(db=db, target_url=target_url, limit=limit)
    items = [_to_summary(audit) for audit in audits]
    return AuditListResponse(items=items, count=len(items))


@router.get("/{audit_id}", response_model=AuditDetailResponse)
def get_audit(
    audit_id: UUID,
    db: Session = Depends(get_db),
    orchestrator: AuditOrchestratorService = Depends(get_audit_orchestrator),
) -> AuditDetailResponse:
    audit = orchestrator.get_audit(db=db, audit_id=audit_id)
    if audit is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Audit not found: {audit_id}",
        )
    return AuditDetailResponse(
        **_to_summary(audit).model_dump(),
        keyword=audit.keyword,
        provider_data=audit.provider_data or {},
        started_at=audit.started_at,
        completed_at=audit.completed_at,
        updated_at=audit.updated_at,
    )


def _to_summary(audit: Audit) -> AuditSummaryResponse:
    return AuditSummaryResponse(
        id=audit.id,
        target_url=audit.target_url,
        domain=audit.domain,
        status=audit.status,
        scores=AuditScoresResponse(**(audit.scores or {})),
        error=audit.error,
        created_at=audit.created_at,
    )
