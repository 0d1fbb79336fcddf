"""
Statistics

Analytics page data: daily revenue and signups, status and category
breakdowns, product performance and period comparisons. Canonical records
are loaded into Polars DataFrames and reduced there.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import polars as pl
import structlog

from src.reporting.aggregator import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    format_rate,
    is_low_stock,
    is_out_of_stock,
)
from src.reporting.dashboard import start_of_month
from src.reporting.records import OrderRecord, ProductRecord, UserRecord
from src.reporting.schemas import (
    CategoryRevenue,
    DailyCustomers,
    DailyRevenue,
    MonthlyComparison,
    OrderValueSummary,
    ProductMetrics,
    ProductPerformance,
    RecentActivity,
    Statistics,
    StatusBreakdown,
)

logger = structlog.get_logger(__name__)

UNCATEGORIZED = "uncategorized"

ORDER_SCHEMA = {
    "order_id": pl.Utf8,
    "user_id": pl.Utf8,
    "status": pl.Utf8,
    "total": pl.Float64,
    "created_at": pl.Datetime("us"),
}

ITEM_SCHEMA = {
    "product_id": pl.Utf8,
    "price": pl.Float64,
    "quantity": pl.Int64,
}

PRODUCT_SCHEMA = {
    "product_id": pl.Utf8,
    "name": pl.Utf8,
    "category": pl.Utf8,
}

USER_SCHEMA = {
    "user_id": pl.Utf8,
    "created_at": pl.Datetime("us"),
}


def _naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Polars columns hold naive UTC timestamps"""
    if moment is None:
        return None
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


# =============================================================================
# FRAMES
# =============================================================================

def orders_frame(orders: Sequence[OrderRecord]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "order_id": [o.order_id for o in orders],
            "user_id": [o.user_id for o in orders],
            "status": [o.status for o in orders],
            "total": [o.total for o in orders],
            "created_at": [_naive_utc(o.created_at) for o in orders],
        },
        schema=ORDER_SCHEMA,
    )


def items_frame(orders: Sequence[OrderRecord]) -> pl.DataFrame:
    items = [item for order in orders for item in order.items]
    return pl.DataFrame(
        {
            "product_id": [i.product_id for i in items],
            "price": [i.price for i in items],
            "quantity": [i.quantity for i in items],
        },
        schema=ITEM_SCHEMA,
    )


def products_frame(products: Sequence[ProductRecord]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "product_id": [p.product_id for p in products],
            "name": [p.name for p in products],
            "category": [p.category for p in products],
        },
        schema=PRODUCT_SCHEMA,
    )


def users_frame(users: Sequence[UserRecord]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "user_id": [u.user_id for u in users],
            "created_at": [_naive_utc(u.created_at) for u in users],
        },
        schema=USER_SCHEMA,
    )


def _line_revenue() -> pl.Expr:
    return (pl.col("price") * pl.col("quantity")).sum().alias("revenue")


# =============================================================================
# BREAKDOWNS
# =============================================================================

def revenue_by_day(orders: pl.DataFrame, since: datetime) -> pl.DataFrame:
    """Revenue and order count per calendar day since the given instant"""
    return (
        orders
        .filter(pl.col("created_at") >= _naive_utc(since))
        .with_columns(pl.col("created_at").dt.strftime("%Y-%m-%d").alias("date"))
        .group_by("date")
        .agg(
            pl.col("total").sum().alias("revenue"),
            pl.len().alias("orders"),
        )
        .sort("date")
    )


def orders_by_status(orders: pl.DataFrame) -> pl.DataFrame:
    """Order count and revenue per stored status, most frequent first"""
    return (
        orders
        .group_by("status")
        .agg(
            pl.len().alias("count"),
            pl.col("total").sum().alias("revenue"),
        )
        .sort(["count", "status"], descending=[True, False], nulls_last=True)
    )


def product_performance(items: pl.DataFrame, products: pl.DataFrame) -> pl.DataFrame:
    """Units and item revenue for every catalog product, best earners first"""
    sales = items.group_by("product_id").agg(
        pl.col("quantity").sum().alias("total_quantity"),
        (pl.col("price") * pl.col("quantity")).sum().alias("total_revenue"),
    )
    return (
        products
        .with_row_index("position")
        .select("position", "product_id", "name")
        .join(sales, on="product_id", how="left")
        .with_columns(
            pl.col("total_quantity").fill_null(0),
            pl.col("total_revenue").fill_null(0.0),
        )
        .sort(["total_revenue", "position"], descending=[True, False])
        .drop("position")
    )


def customers_by_day(users: pl.DataFrame, since: datetime) -> pl.DataFrame:
    """Signups per calendar day since the given instant"""
    return (
        users
        .filter(pl.col("created_at") >= _naive_utc(since))
        .with_columns(pl.col("created_at").dt.strftime("%Y-%m-%d").alias("date"))
        .group_by("date")
        .agg(pl.len().alias("new_customers"))
        .sort("date")
    )


def revenue_by_category(items: pl.DataFrame, products: pl.DataFrame) -> pl.DataFrame:
    """Item revenue and units per product category"""
    categories = products.select("product_id", "category").unique(subset="product_id", keep="first")
    return (
        items
        .join(categories, on="product_id", how="left")
        .with_columns(pl.col("category").fill_null(UNCATEGORIZED))
        .group_by("category")
        .agg(
            _line_revenue(),
            pl.col("quantity").sum().alias("quantity"),
        )
        .sort(["revenue", "category"], descending=[True, False])
    )


def _revenue_between(orders: pl.DataFrame, start: datetime, end: Optional[datetime] = None) -> float:
    condition = pl.col("created_at") >= _naive_utc(start)
    if end is not None:
        condition = condition & (pl.col("created_at") < _naive_utc(end))
    return float(orders.filter(condition)["total"].sum())


def order_value_summary(orders: pl.DataFrame) -> OrderValueSummary:
    if orders.height == 0:
        return OrderValueSummary(avg_value=0.0, min_value=0.0, max_value=0.0)
    totals = orders["total"]
    return OrderValueSummary(
        avg_value=float(totals.mean()),
        min_value=float(totals.min()),
        max_value=float(totals.max()),
    )


# =============================================================================
# STATISTICS
# =============================================================================

def compute_statistics(
    orders: Sequence[OrderRecord],
    users: Sequence[UserRecord],
    products: Sequence[ProductRecord],
    now: Optional[datetime] = None,
    trend_days: int = 30,
    activity_days: int = 7,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> Statistics:
    """
    Compute the analytics page statistics.

    Args:
        orders: Every order
        users: Every user
        products: Every product
        now: Reference instant (defaults to the current UTC time)
        trend_days: Window for the daily revenue and signup series
        activity_days: Window for the recent activity counters
        low_stock_threshold: Inclusive upper bound for low stock

    Returns:
        Statistics for the analytics page
    """
    now = now or datetime.now(timezone.utc)
    trend_start = now - timedelta(days=trend_days)
    activity_start = now - timedelta(days=activity_days)
    month_start = start_of_month(now)
    last_month_start = start_of_month(month_start - timedelta(days=1))

    order_df = orders_frame(orders)
    item_df = items_frame(orders)
    product_df = products_frame(products)
    user_df = users_frame(users)

    logger.debug(
        "Statistics frames built",
        orders=order_df.height,
        items=item_df.height,
        products=product_df.height,
        users=user_df.height,
    )

    ordering_users = order_df["user_id"].drop_nulls().n_unique()

    return Statistics(
        revenue_by_day=[DailyRevenue(**row) for row in revenue_by_day(order_df, trend_start).to_dicts()],
        orders_by_status=[StatusBreakdown(**row) for row in orders_by_status(order_df).to_dicts()],
        top_products=[
            ProductPerformance(**row) for row in product_performance(item_df, product_df).to_dicts()
        ],
        customer_growth=[DailyCustomers(**row) for row in customers_by_day(user_df, trend_start).to_dicts()],
        revenue_by_category=[
            CategoryRevenue(**row) for row in revenue_by_category(item_df, product_df).to_dicts()
        ],
        average_order_value=order_value_summary(order_df),
        conversion_rate=format_rate(ordering_users, user_df.height, digits=2),
        recent_activity=RecentActivity(
            orders=order_df.filter(pl.col("created_at") >= _naive_utc(activity_start)).height,
            revenue=_revenue_between(order_df, activity_start),
            new_customers=user_df.filter(pl.col("created_at") >= _naive_utc(activity_start)).height,
        ),
        monthly_comparison=MonthlyComparison(
            this_month=_revenue_between(order_df, month_start),
            last_month=_revenue_between(order_df, last_month_start, month_start),
        ),
        product_metrics=ProductMetrics(
            total=len(products),
            low_stock=sum(1 for p in products if is_low_stock(p, low_stock_threshold)),
            out_of_stock=sum(1 for p in products if is_out_of_stock(p)),
        ),
    )
