"""
Dashboard Summary

Landing page widget: all-time totals, 30-day growth, open orders, this
month's best seller and the most recent orders with their customers.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import structlog

from src.database.models import NOT_AVAILABLE, OPEN_STATUSES
from src.reporting.aggregator import compute_order_status_report, top_selling_product
from src.reporting.parsing import growth_percentage, parse_status, parse_text
from src.reporting.records import OrderRecord, ProductRecord, UserRecord
from src.reporting.schemas import DashboardStats, ProductSales, RecentOrder

logger = structlog.get_logger(__name__)

UserLookup = Callable[[str], Awaitable[Optional[Dict[str, Any]]]]


def start_of_month(now: datetime) -> datetime:
    """First instant of the calendar month containing now"""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _in_range(moment: Optional[datetime], start: datetime, end: Optional[datetime] = None) -> bool:
    """start <= moment, and moment < end when an end is given"""
    if moment is None or moment < start:
        return False
    return end is None or moment < end


def is_open_order(order: OrderRecord) -> bool:
    """Pending, processing or out for delivery, in any letter case"""
    return parse_status(order.status, case_sensitive=False, resolve_aliases=False) in OPEN_STATUSES


def compute_dashboard_summary(
    orders: Sequence[OrderRecord],
    users: Sequence[UserRecord],
    products: Sequence[ProductRecord],
    now: Optional[datetime] = None,
    window_days: int = 30,
) -> DashboardStats:
    """
    Compute the dashboard statistics.

    Growth compares [now - window, now] with the window of equal length
    before it. Totals and the status breakdown cover all orders.
    """
    now = now or datetime.now(timezone.utc)
    current_start = now - timedelta(days=window_days)
    previous_start = now - timedelta(days=2 * window_days)

    current_orders = [o for o in orders if _in_range(o.created_at, current_start)]
    previous_orders = [o for o in orders if _in_range(o.created_at, previous_start, current_start)]

    current_customers = sum(1 for u in users if _in_range(u.created_at, current_start))
    previous_customers = sum(1 for u in users if _in_range(u.created_at, previous_start, current_start))

    month_start = start_of_month(now)
    top = top_selling_product(o for o in orders if _in_range(o.created_at, month_start))

    return DashboardStats(
        total_sales=sum(o.total for o in orders),
        total_orders=len(orders),
        total_customers=len(users),
        total_products=len(products),
        sales_growth=round(growth_percentage(
            sum(o.total for o in current_orders),
            sum(o.total for o in previous_orders),
        ), 1),
        orders_growth=round(growth_percentage(len(current_orders), len(previous_orders)), 1),
        customers_growth=round(growth_percentage(current_customers, previous_customers), 1),
        pending_orders_count=sum(1 for o in orders if is_open_order(o)),
        top_product=top or ProductSales(name=NOT_AVAILABLE, quantity=0),
        order_status=compute_order_status_report(orders),
    )


def most_recent_orders(orders: Sequence[OrderRecord], limit: int = 10) -> List[OrderRecord]:
    """Newest first; orders without a timestamp sort last"""
    dated = sorted(
        (o for o in orders if o.created_at is not None),
        key=lambda o: o.created_at,
        reverse=True,
    )
    undated = [o for o in orders if o.created_at is None]
    return (dated + undated)[:limit]


async def enrich_recent_orders(
    orders: Sequence[OrderRecord],
    lookup_user: UserLookup,
    limit: int = 10,
) -> List[RecentOrder]:
    """
    Attach customer name and email to the most recent orders.

    Each distinct user reference is looked up once. When no user is found
    the order's own customer fields are used, then "N/A".
    """
    recent = most_recent_orders(orders, limit)

    user_ids = list(dict.fromkeys(o.user_id for o in recent if o.user_id is not None))
    found = await asyncio.gather(*(lookup_user(user_id) for user_id in user_ids))
    users = {user_id: doc for user_id, doc in zip(user_ids, found) if doc}

    logger.debug("Resolved recent order customers", orders=len(recent), users=len(users))

    enriched = []
    for order in recent:
        user = users.get(order.user_id, {})
        enriched.append(RecentOrder(
            id=order.order_id,
            order_number=order.order_number,
            customer_name=parse_text(user.get("name")) or order.customer_name or NOT_AVAILABLE,
            customer_email=parse_text(user.get("email")) or order.customer_email or NOT_AVAILABLE,
            total=order.total,
            status=order.status,
            created_at=order.created_at,
            item_count=order.item_count,
        ))
    return enriched
