"""
app/services/fallback_generator.py

Deterministic synthetic provider results used when a live fetch fails.

The same seed always produces the same figure: the seed is hashed with
SHA-256 and the first four bytes are mapped into a fixed range per provider.
"""

from __future__ import annotations

import hashlib
from typing import Any

from app.domain.audit import ProviderKind, ProviderResult

_DEFAULT_SEED = "default"

# Inclusive ranges per provider.
PERFORMANCE_RANGE: tuple[int, int] = (60, 90)
DOMAIN_RANK_RANGE: tuple[int, int] = (3, 8)
SERP_RANK_RANGE: tuple[int, int] = (5, 30)
SOCIAL_RANGE: tuple[int, int] = (50, 90)


def stable_hash(seed: str | None) -> int:
    """
    Map a seed string to a non-negative 32-bit integer, stable across processes.
    """

    digest = hashlib.sha256((seed or _DEFAULT_SEED).encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big")


def _value_in_range(seed: str | None, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return low + stable_hash(seed) % (high - low + 1)


def serp_seed(keyword: str | None, domain: str | None) -> str:
    return f"{keyword or ''}:{domain or ''}"


def generate_fallback(kind: str, seed: str | None, **fields: Any) -> ProviderResult:
    """
    Build a synthetic, successful result for one provider kind.

    ``fields`` are merged into the normalized payload, e.g. the keyword and
    domain a search-rank fallback stands in for.
    """

    if kind == ProviderKind.PAGESPEED:
        normalized: dict[str, Any] = {
            "performance": _value_in_range(seed, PERFORMANCE_RANGE),
            "fcp_ms": None,
            "lcp_ms": None,
            "tbt_ms": None,
            "cls": None,
        }
    elif kind == ProviderKind.OPEN_PAGERANK:
        normalized = {
            "domain": None,
            "rank": float(_value_in_range(seed, DOMAIN_RANK_RANGE)),
        }
    elif kind == ProviderKind.SERP:
        normalized = {
            "keyword": None,
            "domain": None,
            "rank": _value_in_range(seed, SERP_RANK_RANGE),
        }
    else:
        raise ValueError(f"Unsupported provider kind '{kind}'.")

    for key, value in fields.items():
        if key in normalized and key not in ("performance", "rank"):
            normalized[key] = value

    return ProviderResult.success(normalized, fallback=True)


def generate_serp_fallback(keyword: str | None, domain: str | None) -> ProviderResult:
    return generate_fallback(
        ProviderKind.SERP,
        serp_seed(keyword, domain),
        keyword=keyword,
        domain=domain,
    )


def generate_social_score(seed: str | None) -> int:
    """
    Placeholder social score; there is no live social provider.
    """

    return _value_in_range(seed, SOCIAL_RANGE)
