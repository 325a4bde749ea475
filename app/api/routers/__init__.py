"""
app/api/routers package marker.
"""

from app.api.routers.analytics_router import router as analytics_router
from app.api.routers.kpi_router import router as kpi_router

__all__ = [
    "analytics_router",
    "kpi_router",
]
