"""
app/domain/audit.py

Domain models for provider fetches, score aggregation and audit submission.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


class ProviderKind:
    PAGESPEED = "pagespeed"
    OPEN_PAGERANK = "open_pagerank"
    SERP = "serp"


@dataclass(frozen=True)
class ProviderResult:
    """
    Uniform envelope for one provider fetch.

    ``normalized`` is present iff ``ok``; ``error`` is present iff not ``ok``.
    ``fallback`` marks synthesized rather than fetched data.
    """

    ok: bool
    normalized: dict[str, Any] | None = None
    error: str | None = None
    fallback: bool = False
    raw: Any = None

    @classmethod
    def success(
        cls,
        normalized: dict[str, Any],
        *,
        raw: Any = None,
        fallback: bool = False,
    ) -> ProviderResult:
        return cls(ok=True, normalized=normalized, raw=raw, fallback=fallback)

    @classmethod
    def failure(cls, error: str) -> ProviderResult:
        return cls(ok=False, error=error)

    def field(self, name: str) -> Any:
        """
        Return one normalized field, or None for failed results.
        """

        if not self.ok or self.normalized is None:
            return None
        return self.normalized.get(name)

    def to_payload(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "normalized": self.normalized,
            "error": self.error,
            "fallback": self.fallback,
            "raw": self.raw,
        }


@dataclass(frozen=True)
class ScoreSet:
    """
    Category scores on a 0-100 integer scale; None means no signal.
    """

    seo: int | None = None
    rank: int | None = None
    domain_rank: int | None = None
    social: int | None = None
    overall: int | None = None

    def to_payload(self) -> dict[str, int | None]:
        return asdict(self)


@dataclass(frozen=True)
class AuditSubmission:
    """
    Validated and normalized audit request, ready for persistence.
    """

    target_url: str
    domain: str | None
    keyword: str | None
