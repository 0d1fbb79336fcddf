"""
Unit Tests - Field Parsing and Record Normalization
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from bson import Decimal128, ObjectId

from src.database.models import OrderStatus
from src.reporting.parsing import (
    growth_percentage,
    parse_count,
    parse_money,
    parse_quantity,
    parse_status,
    parse_timestamp,
    to_iso8601,
    total_stock,
)
from src.reporting.records import normalize_order, normalize_product, normalize_user


class TestNumericParsing:
    """Tests for money, quantity and stock parsing"""

    @pytest.mark.parametrize("value,expected", [
        (12.5, 12.5),
        (3, 3.0),
        ("19.99", 19.99),
        (Decimal("7.25"), 7.25),
        (Decimal128("42.10"), 42.1),
        (None, 0.0),
        ("abc", 0.0),
        (-5, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        ({"amount": 10}, 0.0),
    ])
    def test_parse_money(self, value, expected):
        assert parse_money(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value,expected", [
        (2, 2),
        ("3", 3),
        (2.7, 2),
        (0, 1),
        (-4, 1),
        (None, 1),
        ("many", 1),
    ])
    def test_parse_quantity_defaults_to_one(self, value, expected):
        assert parse_quantity(value) == expected

    def test_parse_count(self):
        assert parse_count("8") == 8
        assert parse_count(-3) == 0
        assert parse_count(None) == 0

    def test_total_stock_sums_per_size_levels(self):
        assert total_stock([3, 0, 7]) == 10

    def test_total_stock_all_sizes_empty(self):
        assert total_stock([0, 0]) == 0

    def test_total_stock_scalar_and_malformed(self):
        assert total_stock(12) == 12
        assert total_stock("5") == 5
        assert total_stock(None) == 0
        assert total_stock([1, "x", -2]) == 1
        assert total_stock([]) == 0


class TestTimestampParsing:
    """Tests for timestamp parsing and formatting"""

    def test_iso_string_with_z(self):
        parsed = parse_timestamp("2026-10-01T10:00:00.000Z")
        assert parsed == datetime(2026, 10, 1, 10, 0, tzinfo=timezone.utc)

    def test_naive_datetime_is_utc(self):
        parsed = parse_timestamp(datetime(2026, 3, 4, 5, 6))
        assert parsed.tzinfo is not None
        assert parsed == datetime(2026, 3, 4, 5, 6, tzinfo=timezone.utc)

    def test_offset_is_converted_to_utc(self):
        offset = timezone(timedelta(hours=2))
        parsed = parse_timestamp(datetime(2026, 3, 4, 12, 0, tzinfo=offset))
        assert parsed == datetime(2026, 3, 4, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "not a date", 1700000000])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None

    def test_to_iso8601_millisecond_precision(self):
        moment = datetime(2026, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        assert to_iso8601(moment) == "2026-01-02T03:04:05.678Z"

    def test_to_iso8601_naive_treated_as_utc(self):
        assert to_iso8601(datetime(1970, 1, 1)) == "1970-01-01T00:00:00.000Z"


class TestStatusParsing:
    """Tests for status canonicalization"""

    def test_canonical_statuses(self):
        assert parse_status("pending") == OrderStatus.PENDING
        assert parse_status("out for delivery") == OrderStatus.OUT_FOR_DELIVERY

    def test_legacy_aliases(self):
        assert parse_status("completed") == OrderStatus.DELIVERED
        assert parse_status("paid") == OrderStatus.PROCESSING
        assert parse_status("confirmed") == OrderStatus.PROCESSING

    def test_unknown_and_non_string(self):
        assert parse_status("refunded") is None
        assert parse_status(None) is None
        assert parse_status(3) is None

    def test_case_sensitivity(self):
        assert parse_status("Pending") is None
        assert parse_status("Pending", case_sensitive=False) == OrderStatus.PENDING
        assert parse_status("SHIPPED", case_sensitive=False) == OrderStatus.SHIPPED
        assert parse_status(" shipped ", case_sensitive=False) is None

    def test_aliases_can_be_disabled(self):
        assert parse_status("completed", resolve_aliases=False) is None
        assert parse_status("Paid", case_sensitive=False, resolve_aliases=False) is None
        assert parse_status("delivered", resolve_aliases=False) == OrderStatus.DELIVERED


class TestGrowthPercentage:
    """Tests for period-over-period growth"""

    def test_from_zero_with_activity(self):
        assert growth_percentage(10, 0) == 100.0

    def test_from_zero_without_activity(self):
        assert growth_percentage(0, 0) == 0.0

    def test_decline(self):
        assert growth_percentage(50, 100) == -50.0

    def test_increase(self):
        assert growth_percentage(330, 150) == pytest.approx(120.0)


class TestRecordNormalization:
    """Tests for document normalization fallbacks"""

    def test_total_prefers_total_over_legacy_field(self):
        order = normalize_order({"total": 0, "totalAmount": 99})
        assert order.total == 0.0

    def test_total_falls_back_to_legacy_field(self):
        order = normalize_order({"totalAmount": "99.5"})
        assert order.total == 99.5

    def test_missing_total(self):
        assert normalize_order({}).total == 0.0

    def test_line_item_fallbacks(self):
        product_id = ObjectId()
        order = normalize_order({
            "items": [
                {"product": product_id, "productName": "Linen Shirt", "price": 30},
                {"product": {"_id": "p9", "name": "Embedded"}, "quantity": 0},
                {"price": "bad"},
            ],
        })

        first, second, third = order.items
        assert first.product_id == str(product_id)
        assert first.name == "Linen Shirt"
        assert first.quantity == 1
        assert second.product_id == "p9"
        assert second.name == "Unknown Product"
        assert third.product_id is None
        assert third.price == 0.0
        assert order.item_count == 3

    def test_customer_name_from_shipping_address(self):
        order = normalize_order({"shippingAddress": {"fullName": "Riya Sen"}})
        assert order.customer_name == "Riya Sen"

    def test_status_is_kept_as_stored(self):
        order = normalize_order({"status": "completed"})
        assert order.status == "completed"
        assert order.canonical_status == OrderStatus.DELIVERED

    def test_malformed_documents(self):
        order = normalize_order(None)
        assert order.order_id is None
        assert order.items == ()
        assert order.created_at is None

        assert normalize_order({"items": "not a list"}).items == ()
        assert normalize_user("oops").user_id is None

    def test_product_stock_total(self):
        product = normalize_product({"_id": ObjectId(), "name": "Hoodie", "price": 40, "stock": [2, 2, 2, 2]})
        assert product.stock == 8
        assert product.category is None
