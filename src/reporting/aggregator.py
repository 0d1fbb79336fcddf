"""
Report Aggregator

Pure read-and-reduce computations behind the admin report. Inputs are
canonical records (see records.py) fetched in full; nothing here performs
I/O or keeps state between calls.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import structlog

from src.database.models import FULFILLED_STATUSES, NOT_AVAILABLE, OrderStatus
from src.reporting.parsing import EPOCH, parse_status, to_iso8601
from src.reporting.records import OrderRecord, ProductRecord, UserRecord
from src.reporting.schemas import (
    CustomerReport,
    InventoryReport,
    OrderStatusReport,
    ProductSales,
    Report,
    SalesReport,
)

logger = structlog.get_logger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10


class ReportRange(str, Enum):
    """Trailing window selectable on the reports page"""
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_90_DAYS = "90days"
    ALL = "all"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ReportRange":
        """Missing selects 30 days; anything unrecognized selects all time"""
        if value is None or value == "":
            return cls.LAST_30_DAYS
        try:
            return cls(value)
        except ValueError:
            return cls.ALL

    @property
    def days(self) -> Optional[int]:
        return {
            ReportRange.LAST_7_DAYS: 7,
            ReportRange.LAST_30_DAYS: 30,
            ReportRange.LAST_90_DAYS: 90,
        }.get(self)


def resolve_period(report_range: ReportRange, now: datetime) -> Tuple[datetime, datetime]:
    """Inclusive (start, end) for a report range ending at now"""
    days = report_range.days
    if days is None:
        return EPOCH, now
    return now - timedelta(days=days), now


def _within(moment: Optional[datetime], start: datetime, end: datetime) -> bool:
    return moment is not None and start <= moment <= end


def is_fulfilled(order: OrderRecord) -> bool:
    return order.canonical_status in FULFILLED_STATUSES


# =============================================================================
# SALES
# =============================================================================

def top_selling_product(orders: Iterable[OrderRecord]) -> Optional[ProductSales]:
    """
    Product with the most units across all line items of the given orders.

    Items without a product id are grouped together. The first product to
    reach the highest quantity in iteration order wins ties.
    """
    sales: Dict[Optional[str], Dict[str, object]] = {}

    for order in orders:
        for item in order.items:
            entry = sales.get(item.product_id)
            if entry is None:
                entry = sales[item.product_id] = {"name": item.name, "quantity": 0}
            entry["quantity"] += item.quantity

    best_id: Optional[str] = None
    best: Optional[Dict[str, object]] = None
    for product_id, entry in sales.items():
        if best is None or entry["quantity"] > best["quantity"]:
            best_id, best = product_id, entry

    if best is None:
        return None
    return ProductSales(product_id=best_id, name=best["name"], quantity=best["quantity"])


def compute_sales_report(
    orders: Sequence[OrderRecord],
    start: datetime,
    end: datetime,
    fallback_to_all_time: bool = True,
) -> SalesReport:
    """
    Revenue from fulfilled orders created within [start, end].

    When the window holds no fulfilled orders and fallback_to_all_time is
    set, every fulfilled order is used instead. The reported period is
    always the requested one.
    """
    fulfilled = [order for order in orders if is_fulfilled(order)]
    in_window = [order for order in fulfilled if _within(order.created_at, start, end)]

    if not in_window and fallback_to_all_time and fulfilled:
        logger.info(
            "Sales window empty, using all fulfilled orders",
            period_start=to_iso8601(start),
            period_end=to_iso8601(end),
            fallback_orders=len(fulfilled),
        )
        in_window = fulfilled

    total_revenue = sum(order.total for order in in_window)
    total_orders = len(in_window)
    average_order_value = total_revenue / total_orders if total_orders > 0 else 0

    top = top_selling_product(in_window)

    return SalesReport(
        total_revenue=total_revenue,
        total_orders=total_orders,
        average_order_value=average_order_value,
        top_selling_product=top.name if top else NOT_AVAILABLE,
        period_start=to_iso8601(start),
        period_end=to_iso8601(end),
    )


# =============================================================================
# INVENTORY
# =============================================================================

def is_low_stock(product: ProductRecord, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> bool:
    return 0 < product.stock <= threshold


def is_out_of_stock(product: ProductRecord) -> bool:
    return product.stock == 0


def compute_inventory_report(
    products: Sequence[ProductRecord],
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> InventoryReport:
    """Stock counts and the value of stock on hand"""
    return InventoryReport(
        total_products=len(products),
        low_stock_products=sum(1 for p in products if is_low_stock(p, low_stock_threshold)),
        out_of_stock_products=sum(1 for p in products if is_out_of_stock(p)),
        total_value=sum(p.price * p.stock for p in products),
    )


# =============================================================================
# CUSTOMERS
# =============================================================================

def ordering_user_ids(orders: Iterable[OrderRecord]) -> set:
    """Distinct user references across orders"""
    return {order.user_id for order in orders if order.user_id is not None}


def format_rate(numerator: int, denominator: int, digits: int = 1) -> str:
    """Percentage as a fixed-point string, zero when the denominator is zero"""
    if denominator <= 0:
        return f"{0:.{digits}f}"
    return f"{numerator / denominator * 100:.{digits}f}"


def compute_customer_report(
    users: Sequence[UserRecord],
    orders: Sequence[OrderRecord],
    start: datetime,
    end: datetime,
) -> CustomerReport:
    """
    Customer totals for the window.

    returning_customers counts every user who has placed at least one
    order, at any time.
    """
    total_customers = len(users)
    returning_customers = len(ordering_user_ids(orders))

    return CustomerReport(
        total_customers=total_customers,
        new_customers=sum(1 for user in users if _within(user.created_at, start, end)),
        returning_customers=returning_customers,
        conversion_rate=format_rate(returning_customers, total_customers),
    )


# =============================================================================
# ORDER STATUS
# =============================================================================

def compute_order_status_report(orders: Iterable[OrderRecord]) -> OrderStatusReport:
    """
    Count orders whose stored status is exactly one of the canonical strings.

    Legacy aliases and differently cased statuses fall in no bucket.
    """
    counts = {status: 0 for status in OrderStatus}
    for order in orders:
        status = parse_status(order.status, resolve_aliases=False)
        if status is not None:
            counts[status] += 1

    return OrderStatusReport(
        pending=counts[OrderStatus.PENDING],
        processing=counts[OrderStatus.PROCESSING],
        shipped=counts[OrderStatus.SHIPPED],
        out_for_delivery=counts[OrderStatus.OUT_FOR_DELIVERY],
        delivered=counts[OrderStatus.DELIVERED],
        cancelled=counts[OrderStatus.CANCELLED],
    )


# =============================================================================
# FULL REPORT
# =============================================================================

def compute_report(
    orders: Sequence[OrderRecord],
    users: Sequence[UserRecord],
    products: Sequence[ProductRecord],
    report_range: ReportRange = ReportRange.LAST_30_DAYS,
    now: Optional[datetime] = None,
    fallback_to_all_time: bool = True,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> Report:
    """
    Build the four-section admin report.

    Args:
        orders: Every order, unfiltered
        users: Every user, unfiltered
        products: Every product
        report_range: Trailing window for sales and new customers
        now: End of the window (defaults to the current UTC time)
        fallback_to_all_time: Empty sales window policy
        low_stock_threshold: Inclusive upper bound for low stock

    Returns:
        Report with sales, inventory, customer and order status sections
    """
    now = now or datetime.now(timezone.utc)
    start, end = resolve_period(report_range, now)

    return Report(
        sales_report=compute_sales_report(orders, start, end, fallback_to_all_time),
        inventory_report=compute_inventory_report(products, low_stock_threshold),
        customer_report=compute_customer_report(users, orders, start, end),
        order_report=compute_order_status_report(orders),
    )
