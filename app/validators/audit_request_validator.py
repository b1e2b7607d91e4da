"""
app/validators/audit_request_validator.py

Validation and normalization of audit submission input.
"""

from __future__ import annotations

from app.domain.audit import AuditSubmission
from app.domain.url_normalization import normalize_domain

MAX_URL_LENGTH = 2048
MAX_KEYWORD_LENGTH = 512


class AuditRequestValidationError(ValueError):
    """
    Raised when an audit request is rejected before any work is queued.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def validate_audit_request(
    *,
    url: str | None,
    domain: str | None = None,
    keyword: str | None = None,
) -> AuditSubmission:
    """
    Validate raw submission fields and return the normalized submission.

    The domain defaults to the URL's hostname when not supplied.
    """

    target_url = _clean(url)
    if target_url is None:
        raise AuditRequestValidationError("url", "url is required")
    if len(target_url) > MAX_URL_LENGTH:
        raise AuditRequestValidationError("url", f"url must be at most {MAX_URL_LENGTH} characters")

    cleaned_keyword = _clean(keyword)
    if cleaned_keyword is not None and len(cleaned_keyword) > MAX_KEYWORD_LENGTH:
        raise AuditRequestValidationError(
            "keyword", f"keyword must be at most {MAX_KEYWORD_LENGTH} characters"
        )

    return AuditSubmission(
        target_url=target_url,
        domain=normalize_domain(_clean(domain) or target_url),
        keyword=cleaned_keyword,
    )
