"""
Unit Tests - Statistics
"""
from datetime import timedelta

import polars as pl
import pytest

from src.reporting.records import normalize_orders, normalize_products
from src.reporting.statistics import (
    compute_statistics,
    items_frame,
    orders_by_status,
    orders_frame,
    product_performance,
    products_frame,
    revenue_by_category,
)


class TestFrames:
    """Tests for record to DataFrame conversion"""

    def test_empty_frames_keep_schema(self):
        orders = orders_frame([])

        assert orders.height == 0
        assert orders.schema["total"] == pl.Float64
        assert items_frame([]).schema["quantity"] == pl.Int64

    def test_items_are_flattened(self, order_records):
        items = items_frame(order_records)

        assert items.height == 6
        assert items["quantity"].sum() == 13


class TestBreakdowns:
    """Tests for individual breakdowns"""

    def test_orders_by_status_sorted_by_count(self):
        orders = normalize_orders([
            {"status": "shipped", "total": 10},
            {"status": "delivered", "total": 20},
            {"status": "delivered", "total": 30},
            {"total": 5},
        ])

        result = orders_by_status(orders_frame(orders)).to_dicts()

        assert result[0] == {"status": "delivered", "count": 2, "revenue": 50.0}
        assert result[1]["status"] == "shipped"
        assert result[2]["status"] is None

    def test_product_performance_includes_unsold_products(self, order_records, product_records):
        result = product_performance(items_frame(order_records), products_frame(product_records))

        assert result["product_id"].to_list() == ["p2", "p1", "p3", "p4"]
        assert result["total_revenue"].to_list() == [250.0, 190.0, 150.0, 0.0]
        assert result["total_quantity"].to_list() == [5, 6, 2, 0]

    def test_revenue_by_category(self, order_records, product_records):
        result = revenue_by_category(items_frame(order_records), products_frame(product_records)).to_dicts()

        assert result == [
            {"category": "jeans", "revenue": 250.0, "quantity": 5},
            {"category": "t-shirts", "revenue": 190.0, "quantity": 6},
            {"category": "accessories", "revenue": 150.0, "quantity": 2},
        ]

    def test_unknown_products_are_uncategorized(self):
        orders = normalize_orders([
            {"items": [{"productId": "gone", "price": 12, "quantity": 2}]},
        ])
        products = normalize_products([])

        result = revenue_by_category(items_frame(orders), products_frame(products)).to_dicts()

        assert result == [{"category": "uncategorized", "revenue": 24.0, "quantity": 2}]


class TestComputeStatistics:
    """Tests for compute_statistics"""

    def test_daily_revenue(self, order_records, user_records, product_records, now):
        stats = compute_statistics(order_records, user_records, product_records, now=now)

        assert [d.date for d in stats.revenue_by_day] == [
            "2026-10-08",
            "2026-10-13",
            "2026-10-15",
            "2026-10-16",
            "2026-10-17",
        ]
        assert sum(d.revenue for d in stats.revenue_by_day) == pytest.approx(480.0)
        assert sum(d.orders for d in stats.revenue_by_day) == 5

    def test_customer_growth(self, order_records, user_records, product_records, now):
        stats = compute_statistics(order_records, user_records, product_records, now=now)

        assert [(d.date, d.new_customers) for d in stats.customer_growth] == [
            ("2026-09-28", 1),
            ("2026-10-15", 1),
        ]

    def test_status_breakdown_uses_stored_statuses(self, order_records, user_records, product_records, now):
        stats = compute_statistics(order_records, user_records, product_records, now=now)

        statuses = {s.status for s in stats.orders_by_status}
        assert statuses == {"delivered", "shipped", "pending", "completed", "cancelled", "refunded"}
        assert sum(s.count for s in stats.orders_by_status) == 6

    def test_summary_figures(self, order_records, user_records, product_records, now):
        stats = compute_statistics(order_records, user_records, product_records, now=now)

        assert stats.average_order_value.avg_value == pytest.approx(105.0)
        assert stats.average_order_value.min_value == 40.0
        assert stats.average_order_value.max_value == 200.0
        assert stats.conversion_rate == "75.00"

    def test_recent_activity(self, order_records, user_records, product_records, now):
        stats = compute_statistics(order_records, user_records, product_records, now=now)

        assert stats.recent_activity.orders == 4
        assert stats.recent_activity.revenue == pytest.approx(280.0)
        assert stats.recent_activity.new_customers == 1

    def test_monthly_comparison(self, order_records, user_records, product_records, now):
        stats = compute_statistics(order_records, user_records, product_records, now=now)

        assert stats.monthly_comparison.this_month == pytest.approx(480.0)
        assert stats.monthly_comparison.last_month == pytest.approx(150.0)

    def test_product_metrics(self, order_records, user_records, product_records, now):
        stats = compute_statistics(order_records, user_records, product_records, now=now)

        assert stats.product_metrics.total == 4
        assert stats.product_metrics.low_stock == 2
        assert stats.product_metrics.out_of_stock == 1

    def test_top_products(self, order_records, user_records, product_records, now):
        stats = compute_statistics(order_records, user_records, product_records, now=now)

        assert stats.top_products[0].name == "Slim Jeans"
        assert stats.top_products[-1].total_quantity == 0

    def test_empty_database(self, now):
        stats = compute_statistics([], [], [], now=now)

        assert stats.revenue_by_day == []
        assert stats.orders_by_status == []
        assert stats.top_products == []
        assert stats.revenue_by_category == []
        assert stats.average_order_value.avg_value == 0.0
        assert stats.conversion_rate == "0.00"
        assert stats.recent_activity.revenue == 0.0
        assert stats.monthly_comparison.last_month == 0.0

    def test_undated_orders_are_excluded_from_windows(self, now):
        orders = normalize_orders([
            {"total": 50, "status": "delivered"},
            {"total": 20, "status": "delivered", "createdAt": now - timedelta(days=1)},
        ])

        stats = compute_statistics(orders, [], [], now=now)

        assert stats.recent_activity.orders == 1
        assert stats.recent_activity.revenue == 20.0
        assert stats.average_order_value.avg_value == 35.0

    def test_serializes_camel_case(self, order_records, user_records, product_records, now):
        dumped = compute_statistics(order_records, user_records, product_records, now=now).model_dump(by_alias=True)

        assert "revenueByDay" in dumped
        assert "thisMonth" in dumped["monthlyComparison"]
        assert "totalQuantity" in dumped["topProducts"][0]
