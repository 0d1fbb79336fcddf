"""
Test Suite Configuration
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from bson import Decimal128
from fastapi.testclient import TestClient

from src.config import ReportingSettings, Settings
from src.reporting.errors import UpstreamUnavailableError
from src.reporting.records import normalize_orders, normalize_products, normalize_users
from src.reporting.service import ReportService
from src.serving.api.dependencies import get_data_source, get_report_service
from src.serving.api.main import create_api_app

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


class InMemoryDataSource:
    """Data source serving fixed documents"""

    def __init__(self, orders=None, users=None, products=None):
        self.orders = list(orders or [])
        self.users = list(users or [])
        self.products = list(products or [])
        self.user_lookups: List[str] = []

    async def fetch_orders(self) -> List[Dict[str, Any]]:
        return self.orders

    async def fetch_users(self) -> List[Dict[str, Any]]:
        return self.users

    async def fetch_products(self) -> List[Dict[str, Any]]:
        return self.products

    async def fetch_user(self, user_ref: str) -> Optional[Dict[str, Any]]:
        self.user_lookups.append(user_ref)
        for user in self.users:
            if user.get("firebaseUid") == user_ref or str(user.get("_id")) == user_ref:
                return user
        return None


class FailingDataSource(InMemoryDataSource):
    """Data source whose order reads fail"""

    async def fetch_orders(self) -> List[Dict[str, Any]]:
        raise UpstreamUnavailableError("Failed to read orders: connection refused")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sample_orders() -> List[Dict[str, Any]]:
    """
    Six orders: two fulfilled inside the last 30 days, one legacy
    fulfilled order 45 days back, and pending, cancelled and
    unrecognized orders.
    """
    return [
        {
            "_id": "o1",
            "orderNumber": "ORD-001",
            "userId": "uid-1",
            "status": "delivered",
            "total": 100.0,
            "createdAt": days_ago(2),
            "items": [
                {"productId": "p1", "name": "Classic Tee", "price": 25.0, "quantity": 2},
                {"productId": "p2", "name": "Slim Jeans", "price": 50.0, "quantity": 1},
            ],
        },
        {
            "_id": "o2",
            "orderNumber": "ORD-002",
            "userId": "uid-2",
            "status": "shipped",
            "total": Decimal128("200.00"),
            "createdAt": "2026-10-08T12:00:00.000Z",
            "items": [
                {"productId": "p2", "name": "Slim Jeans", "price": 50.0, "quantity": 4},
            ],
        },
        {
            "_id": "o3",
            "orderNumber": "ORD-003",
            "userId": "uid-1",
            "status": "pending",
            "total": 80.0,
            "createdAt": days_ago(1),
            "customerName": "Walk In",
            "customerEmail": "walkin@example.com",
            "items": [
                {"productId": "p1", "name": "Classic Tee", "price": 40.0, "quantity": 2},
            ],
        },
        {
            "_id": "o4",
            "orderNumber": "ORD-004",
            "userId": "uid-3",
            "status": "completed",
            "totalAmount": 150.0,
            "createdAt": days_ago(45),
            "items": [
                {"product": "p3", "productName": "Canvas Tote", "price": 75.0, "quantity": 2},
            ],
        },
        {
            "_id": "o5",
            "orderNumber": "ORD-005",
            "userId": "uid-2",
            "status": "cancelled",
            "total": 60.0,
            "createdAt": days_ago(5),
            "items": [
                {"productId": "p1", "name": "Classic Tee", "price": 30.0, "quantity": 2},
            ],
        },
        {
            "_id": "o6",
            "orderNumber": "ORD-006",
            "userId": "uid-2",
            "status": "refunded",
            "total": 40.0,
            "createdAt": days_ago(3),
            "items": [],
        },
    ]


@pytest.fixture
def sample_users() -> List[Dict[str, Any]]:
    return [
        {
            "_id": "u1",
            "firebaseUid": "uid-1",
            "name": "Asha Rao",
            "email": "asha@example.com",
            "role": "customer",
            "createdAt": days_ago(100),
        },
        {
            "_id": "u2",
            "firebaseUid": "uid-2",
            "name": "Ben Carter",
            "email": "ben@example.com",
            "role": "customer",
            "createdAt": days_ago(20),
        },
        {
            "_id": "u3",
            "firebaseUid": "uid-3",
            "name": "Chen Li",
            "email": "chen@example.com",
            "role": "customer",
            "createdAt": days_ago(50),
        },
        {
            "_id": "u4",
            "firebaseUid": "uid-4",
            "name": "Dana Okafor",
            "email": "dana@example.com",
            "role": "admin",
            "createdAt": days_ago(3),
        },
    ]


@pytest.fixture
def sample_products() -> List[Dict[str, Any]]:
    """
    Stock totals: 10 (per size), 25, 0 and 5.

    Low stock is 0 < stock <= 10, so the [3, 0, 7] tee (total 10) counts as
    low stock; the inclusive threshold wins over any reading that treats it
    as neither low nor out of stock.
    """
    return [
        {"_id": "p1", "name": "Classic Tee", "price": 20.0, "stock": [3, 0, 7], "category": "t-shirts"},
        {"_id": "p2", "name": "Slim Jeans", "price": 50.0, "stock": 25, "category": "jeans"},
        {"_id": "p3", "name": "Canvas Tote", "price": 15.0, "stock": 0, "category": "accessories"},
        {"_id": "p4", "name": "Wool Scarf", "price": 30.0, "stock": "5", "category": "accessories"},
    ]


@pytest.fixture
def order_records(sample_orders):
    return normalize_orders(sample_orders)


@pytest.fixture
def user_records(sample_users):
    return normalize_users(sample_users)


@pytest.fixture
def product_records(sample_products):
    return normalize_products(sample_products)


@pytest.fixture
def data_source(sample_orders, sample_users, sample_products) -> InMemoryDataSource:
    return InMemoryDataSource(sample_orders, sample_users, sample_products)


@pytest.fixture
def report_service(data_source) -> ReportService:
    return ReportService(data_source, settings=ReportingSettings(), clock=lambda: NOW)


@pytest.fixture
def api_app():
    app = create_api_app()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app, report_service) -> TestClient:
    """API client backed by the sample documents with a fixed clock"""
    api_app.dependency_overrides[get_report_service] = lambda: report_service
    return TestClient(api_app)


@pytest.fixture
def failing_client(api_app) -> TestClient:
    """API client whose data source cannot be read"""
    api_app.dependency_overrides[get_data_source] = lambda: FailingDataSource()
    return TestClient(api_app)
