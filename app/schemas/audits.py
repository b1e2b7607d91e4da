"""
Schemas for audit submission, status and history endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class AuditCreateRequest(BaseModel):
    url: str = Field(default="", description="Page to audit")
    domain: str | None = Field(default=None, description="Optional domain; defaults to the URL host")
    keyword: str | None = Field(default=None, description="Optional keyword for search-rank lookup")


class AuditAcceptedResponse(BaseModel):
    audit_id: UUID
    status: str


class AuditScoresResponse(BaseModel):
    seo: int | None = None
    rank: int | None = None
    domain_rank: int | None = None
    social: int | None = None
    overall: int | None = None


class AuditSummaryResponse(BaseModel):
    id: UUID
    target_url: str
    domain: str | None = None
    status: str
    scores: AuditScoresResponse = Field(default_factory=AuditScoresResponse)
    error: str | None = None
    created_at: datetime


class AuditDetailResponse(AuditSummaryResponse):
    keyword: str | None = None
    provider_data: dict[str, Any] = Field(default_factory=dict)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    updated_at: datetime


class AuditListResponse(BaseModel):
    items: list[AuditSummaryResponse] = Field(default_factory=list)
    count: int = Field(..., ge=0)


class ProviderHealthResponse(BaseModel):
    ok: bool = True
    providers_configured: dict[str, bool]


class ProviderDemoResponse(BaseModel):
    ok: bool = True
    providers: dict[str, dict[str, Any] | None]
    scores: AuditScoresResponse
    domain: str | None = None
