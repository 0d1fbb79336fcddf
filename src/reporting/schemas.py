"""
Report Response Models

Pydantic models for every report the service produces. Fields are snake_case
in Python and serialized with camelCase aliases for the dashboard UI.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# FULL REPORT
# =============================================================================

class SalesReport(CamelModel):
    """Fulfilled-order sales over the requested window"""
    total_revenue: float
    total_orders: int
    average_order_value: float
    top_selling_product: str
    period_start: str
    period_end: str


class InventoryReport(CamelModel):
    """Catalog stock levels and valuation"""
    total_products: int
    low_stock_products: int
    out_of_stock_products: int
    total_value: float


class CustomerReport(CamelModel):
    """Customer base and conversion"""
    total_customers: int
    new_customers: int
    returning_customers: int
    conversion_rate: str


class OrderStatusReport(CamelModel):
    """All-time order count per canonical status"""
    pending: int = 0
    processing: int = 0
    shipped: int = 0
    out_for_delivery: int = 0
    delivered: int = 0
    cancelled: int = 0


class Report(CamelModel):
    """Full admin report"""
    sales_report: SalesReport
    inventory_report: InventoryReport
    customer_report: CustomerReport
    order_report: OrderStatusReport


class ReportResponse(CamelModel):
    success: bool = True
    report: Report


# =============================================================================
# DASHBOARD
# =============================================================================

class ProductSales(CamelModel):
    """Units sold for one product"""
    product_id: Optional[str] = None
    name: str
    quantity: int


class DashboardStats(CamelModel):
    """Landing page summary"""
    total_sales: float
    total_orders: int
    total_customers: int
    total_products: int
    sales_growth: float
    orders_growth: float
    customers_growth: float
    pending_orders_count: int
    top_product: ProductSales
    order_status: OrderStatusReport


class RecentOrder(CamelModel):
    """Recent order with its customer resolved"""
    id: Optional[str]
    order_number: Optional[str]
    customer_name: str
    customer_email: str
    total: float
    status: Optional[str]
    created_at: Optional[datetime]
    item_count: int


class DashboardResponse(CamelModel):
    success: bool = True
    stats: DashboardStats
    recent_orders: List[RecentOrder]


# =============================================================================
# STATISTICS
# =============================================================================

class DailyRevenue(CamelModel):
    date: str
    revenue: float
    orders: int


class StatusBreakdown(CamelModel):
    status: Optional[str]
    count: int
    revenue: float


class ProductPerformance(CamelModel):
    product_id: Optional[str]
    name: str
    total_quantity: int
    total_revenue: float


class DailyCustomers(CamelModel):
    date: str
    new_customers: int


class CategoryRevenue(CamelModel):
    category: str
    revenue: float
    quantity: int


class OrderValueSummary(CamelModel):
    avg_value: float
    min_value: float
    max_value: float


class RecentActivity(CamelModel):
    orders: int
    revenue: float
    new_customers: int


class MonthlyComparison(CamelModel):
    this_month: float
    last_month: float


class ProductMetrics(CamelModel):
    total: int
    low_stock: int
    out_of_stock: int


class Statistics(CamelModel):
    """Analytics page data"""
    revenue_by_day: List[DailyRevenue]
    orders_by_status: List[StatusBreakdown]
    top_products: List[ProductPerformance]
    customer_growth: List[DailyCustomers]
    revenue_by_category: List[CategoryRevenue]
    average_order_value: OrderValueSummary
    conversion_rate: str
    recent_activity: RecentActivity
    monthly_comparison: MonthlyComparison
    product_metrics: ProductMetrics


class StatisticsResponse(CamelModel):
    success: bool = True
    statistics: Statistics


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
