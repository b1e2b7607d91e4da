"""
app/services/score_aggregator.py

Combines normalized provider results into 0-100 category scores and a
weighted overall score.

Every function here is pure: same inputs, same ScoreSet. Missing or failed
provider results yield None categories rather than errors, and the overall
score is renormalized over whichever weighted categories are present.
"""

from __future__ import annotations

import math
from typing import Any

from app.domain.audit import ProviderResult, ScoreSet

# Overall weights; social is reported but never weighted.
SEO_WEIGHT: float = 0.4
RANK_WEIGHT: float = 0.4
DOMAIN_RANK_WEIGHT: float = 0.2

CLS_SEVERE: float = 0.25
CLS_MODERATE: float = 0.1
TBT_SEVERE_MS: float = 600.0
TBT_MODERATE_MS: float = 300.0

SERP_BEST_RANK: int = 1
SERP_WORST_RANK: int = 50


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's ``round`` is banker's rounding; scores use the conventional
    rule so 72.5 becomes 73.
    """
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round and clamp a raw score into the integer range [0, 100]."""
    return max(0, min(100, round_half_up(value)))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def score_from_pagespeed(normalized: dict[str, Any] | None) -> int | None:
    """Derive the SEO score from performance, penalizing poor CLS and TBT.

    Args:
        normalized: PageSpeed normalized payload or None.

    Returns:
        Score in [0, 100], or None when no performance figure exists.
    """
    if not normalized or not _is_number(normalized.get("performance")):
        return None

    score = float(normalized["performance"])

    cls = normalized.get("cls")
    if _is_number(cls):
        if cls > CLS_SEVERE:
            score -= 10
        elif cls > CLS_MODERATE:
            score -= 5

    tbt_ms = normalized.get("tbt_ms")
    if _is_number(tbt_ms):
        if tbt_ms > TBT_SEVERE_MS:
            score -= 10
        elif tbt_ms > TBT_MODERATE_MS:
            score -= 5

    return clamp_score(score)


def score_from_open_pagerank(rank: Any) -> int | None:
    """Scale a 0-10 domain rank to 0-100."""
    if not _is_number(rank):
        return None
    return clamp_score(rank * 10)


def score_from_serp_rank(rank: Any) -> int | None:
    """Invert a 1-50 search position: rank 1 -> 100, rank 50 -> 2."""
    if not _is_number(rank):
        return None
    step = 98 / (SERP_WORST_RANK - SERP_BEST_RANK)
    return clamp_score(100 - (rank - SERP_BEST_RANK) * step)


def compute_overall(
    *,
    seo: int | None,
    rank: int | None,
    domain_rank: int | None,
) -> int | None:
    """Weighted mean over present categories; None when all are absent."""
    parts = [
        (weight, score)
        for weight, score in (
            (SEO_WEIGHT, seo),
            (RANK_WEIGHT, rank),
            (DOMAIN_RANK_WEIGHT, domain_rank),
        )
        if score is not None
    ]
    if not parts:
        return None
    total_weight = sum(weight for weight, _ in parts)
    return clamp_score(sum(weight * score for weight, score in parts) / total_weight)


def compute_scores(
    *,
    pagespeed: ProviderResult | None = None,
    open_pagerank: ProviderResult | None = None,
    serp: ProviderResult | None = None,
    social: int | None = None,
) -> ScoreSet:
    """Aggregate provider results into a ScoreSet.

    Args:
        pagespeed: Performance provider result, or None if not run.
        open_pagerank: Domain rank provider result, or None.
        serp: Search rank provider result, or None when skipped.
        social: Pre-computed social score; there is no social provider.

    Returns:
        ScoreSet with None for every category lacking a usable signal.
    """
    seo = score_from_pagespeed(pagespeed.normalized if pagespeed and pagespeed.ok else None)
    rank = score_from_serp_rank(serp.field("rank") if serp else None)
    domain_rank = score_from_open_pagerank(open_pagerank.field("rank") if open_pagerank else None)

    return ScoreSet(
        seo=seo,
        rank=rank,
        domain_rank=domain_rank,
        social=clamp_score(social) if social is not None else None,
        overall=compute_overall(seo=seo, rank=rank, domain_rank=domain_rank),
    )
