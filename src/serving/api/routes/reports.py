"""
Reports API Endpoints

Full admin report: sales, inventory, customers and order status.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
import structlog

from src.reporting.aggregator import ReportRange
from src.reporting.schemas import Report, ReportResponse
from src.reporting.service import ReportService
from src.serving.api.dependencies import get_report_service
from src.serving.cache import reports_cache

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("", response_model=ReportResponse)
async def get_report(
    range_param: Optional[str] = Query(
        None,
        alias="range",
        description="Trailing window: 7days, 30days (default), 90days or all",
    ),
    service: ReportService = Depends(get_report_service),
) -> ReportResponse:
    """
    Generate the admin report for a trailing window.

    Unrecognized ranges report on all time.
    """
    report_range = ReportRange.parse(range_param)
    logger.info("get_report called", range=report_range.value)

    cached = await reports_cache.get(report_range.value)
    if cached:
        logger.debug("Returning cached report", range=report_range.value)
        return ReportResponse(report=Report.model_validate(cached))

    report = await service.build_report(report_range)
    await reports_cache.set(report_range.value, report.model_dump(mode="json"))

    return ReportResponse(report=report)
