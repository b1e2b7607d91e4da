"""
app/schemas package marker.
"""

from app.schemas.audits import (
    AuditAcceptedResponse,
    AuditCreateRequest,
    AuditDetailResponse,
    AuditListResponse,
    AuditScoresResponse,
    AuditSummaryResponse,
    ProviderDemoResponse,
    ProviderHealthResponse,
)

__all__ = [
    "AuditAcceptedResponse",
    "AuditCreateRequest",
    "AuditDetailResponse",
    "AuditListResponse",
    "AuditScoresResponse",
    "AuditSummaryResponse",
    "ProviderDemoResponse",
    "ProviderHealthResponse",
]
