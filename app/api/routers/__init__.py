"""
app/api/routers package marker.
"""

from app.api.routers.audits import router as audits_router
from app.api.routers.providers import router as providers_router

__all__ = [
    "audits_router",
    "providers_router",
]
