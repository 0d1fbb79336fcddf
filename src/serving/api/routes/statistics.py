"""
Statistics API Endpoints

Analytics page data.
"""

from fastapi import APIRouter, Depends
import structlog

from src.reporting.schemas import Statistics, StatisticsResponse
from src.reporting.service import ReportService
from src.serving.api.dependencies import get_report_service
from src.serving.cache import statistics_cache

router = APIRouter()
logger = structlog.get_logger(__name__)

CACHE_KEY = "all"


@router.get("", response_model=StatisticsResponse)
async def get_statistics(
    service: ReportService = Depends(get_report_service),
) -> StatisticsResponse:
    """
    Revenue and signup trends, status and category breakdowns,
    product performance, and period comparisons.
    """
    cached = await statistics_cache.get(CACHE_KEY)
    if cached:
        return StatisticsResponse(statistics=Statistics.model_validate(cached))

    statistics = await service.build_statistics()
    await statistics_cache.set(CACHE_KEY, statistics.model_dump(mode="json"))

    return StatisticsResponse(statistics=statistics)
