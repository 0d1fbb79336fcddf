"""
API Routes Module
"""
from .health import router as health_router
from .reports import router as reports_router
from .dashboard import router as dashboard_router
from .statistics import router as statistics_router

__all__ = [
    "health_router",
    "reports_router",
    "dashboard_router",
    "statistics_router",
]
