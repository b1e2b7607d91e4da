"""
app/providers package marker.
"""

from app.providers.base import BaseProvider, ProviderRequestError
from app.providers.open_pagerank_provider import OpenPageRankProvider
from app.providers.pagespeed_provider import PageSpeedProvider
from app.providers.serpapi_provider import MAX_SERP_RANK, SerpAPIProvider, find_domain_rank

__all__ = [
    "BaseProvider",
    "MAX_SERP_RANK",
    "OpenPageRankProvider",
    "PageSpeedProvider",
    "ProviderRequestError",
    "SerpAPIProvider",
    "find_domain_rank",
]
