"""
Reporting Module
"""
from .aggregator import (
    ReportRange,
    compute_customer_report,
    compute_inventory_report,
    compute_order_status_report,
    compute_report,
    compute_sales_report,
    resolve_period,
    top_selling_product,
)
from .dashboard import compute_dashboard_summary, enrich_recent_orders
from .errors import ReportingError, UpstreamUnavailableError
from .statistics import compute_statistics

__all__ = [
    "ReportRange",
    "compute_customer_report",
    "compute_inventory_report",
    "compute_order_status_report",
    "compute_report",
    "compute_sales_report",
    "resolve_period",
    "top_selling_product",
    "compute_dashboard_summary",
    "enrich_recent_orders",
    "compute_statistics",
    "ReportingError",
    "UpstreamUnavailableError",
]
