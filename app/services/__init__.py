"""
app/services package marker.
"""

from app.services.audit_orchestrator_service import AuditOrchestratorService
from app.services.audit_runtime import AuditRuntime, build_audit_runtime
from app.services.audit_state_machine import (
    AuditNotFoundError,
    AuditProcessingFailedError,
    AuditStateMachine,
)
from app.services.fallback_generator import generate_fallback, generate_social_score
from app.services.provider_fanout_service import ProviderFanoutResult, ProviderFanoutService
from app.services.retry_policy import ProviderRetryExhaustedError, with_retries
from app.services.score_aggregator import compute_scores

__all__ = [
    "AuditNotFoundError",
    "AuditProcessingFailedError",
    "AuditOrchestratorService",
    "AuditRuntime",
    "AuditStateMachine",
    "ProviderFanoutResult",
    "ProviderFanoutService",
    "ProviderRetryExhaustedError",
    "build_audit_runtime",
    "compute_scores",
    "generate_fallback",
    "generate_social_score",
    "with_retries",
]
