"""
Report Service

Reads the collections a report needs and hands canonical records to the
aggregator. Reads are issued concurrently; the reductions are synchronous
and side-effect free.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

import structlog

from src.config import ReportingSettings, get_settings
from src.database.repository import ReportDataSource
from src.reporting.aggregator import ReportRange, compute_report
from src.reporting.dashboard import compute_dashboard_summary, enrich_recent_orders
from src.reporting.records import (
    normalize_orders,
    normalize_products,
    normalize_users,
)
from src.reporting.schemas import (
    DashboardResponse,
    Report,
    Statistics,
)
from src.reporting.statistics import compute_statistics

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportService:
    """
    Builds reports from a data source.

    Example:
        service = ReportService(MongoDataSource(get_database()))
        report = await service.build_report(ReportRange.LAST_7_DAYS)
    """

    def __init__(
        self,
        data_source: ReportDataSource,
        settings: Optional[ReportingSettings] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.data_source = data_source
        self.settings = settings or get_settings().reporting
        self.clock = clock

    async def _load(self) -> Tuple[list, list, list]:
        orders, users, products = await asyncio.gather(
            self.data_source.fetch_orders(),
            self.data_source.fetch_users(),
            self.data_source.fetch_products(),
        )
        return normalize_orders(orders), normalize_users(users), normalize_products(products)

    async def build_report(self, report_range: ReportRange = ReportRange.LAST_30_DAYS) -> Report:
        """Full admin report for a trailing range"""
        orders, users, products = await self._load()

        report = compute_report(
            orders,
            users,
            products,
            report_range=report_range,
            now=self.clock(),
            fallback_to_all_time=self.settings.empty_window_fallback,
            low_stock_threshold=self.settings.low_stock_threshold,
        )

        logger.info(
            "Report generated",
            range=report_range.value,
            orders=len(orders),
            users=len(users),
            products=len(products),
            revenue=report.sales_report.total_revenue,
        )
        return report

    async def build_dashboard(self) -> DashboardResponse:
        """Landing page statistics and recent orders"""
        orders, users, products = await self._load()

        stats = compute_dashboard_summary(
            orders,
            users,
            products,
            now=self.clock(),
            window_days=self.settings.growth_window_days,
        )
        recent_orders = await enrich_recent_orders(
            orders,
            self.data_source.fetch_user,
            limit=self.settings.recent_orders_limit,
        )

        logger.info(
            "Dashboard generated",
            orders=len(orders),
            pending=stats.pending_orders_count,
            recent=len(recent_orders),
        )
        return DashboardResponse(stats=stats, recent_orders=recent_orders)

    async def build_statistics(self) -> Statistics:
        """Analytics page statistics"""
        orders, users, products = await self._load()

        statistics = compute_statistics(
            orders,
            users,
            products,
            now=self.clock(),
            trend_days=self.settings.trend_window_days,
            activity_days=self.settings.activity_window_days,
            low_stock_threshold=self.settings.low_stock_threshold,
        )

        logger.info("Statistics generated", orders=len(orders), products=len(products))
        return statistics
