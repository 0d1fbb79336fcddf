"""
Dashboard API Endpoints

Landing page statistics and recent orders.
"""

from fastapi import APIRouter, Depends
import structlog

from src.reporting.schemas import DashboardResponse
from src.reporting.service import ReportService
from src.serving.api.dependencies import get_report_service
from src.serving.cache import dashboard_cache

router = APIRouter()
logger = structlog.get_logger(__name__)

CACHE_KEY = "stats"


@router.get("/stats", response_model=DashboardResponse)
async def get_dashboard_stats(
    service: ReportService = Depends(get_report_service),
) -> DashboardResponse:
    """Totals, 30-day growth, open orders, top product and recent orders."""
    cached = await dashboard_cache.get(CACHE_KEY)
    if cached:
        logger.debug("Returning cached dashboard")
        return DashboardResponse.model_validate(cached)

    dashboard = await service.build_dashboard()
    await dashboard_cache.set(CACHE_KEY, dashboard.model_dump(mode="json"))

    return dashboard
