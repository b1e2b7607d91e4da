"""
app/domain package marker.
"""

from app.domain.audit import (
    AuditSubmission,
    ProviderKind,
    ProviderResult,
    ScoreSet,
)
from app.domain.url_normalization import normalize_domain, strip_scheme_and_www

__all__ = [
    "AuditSubmission",
    "ProviderKind",
    "ProviderResult",
    "ScoreSet",
    "normalize_domain",
    "strip_scheme_and_www",
]
