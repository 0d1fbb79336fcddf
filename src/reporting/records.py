"""
Canonical Records

Normalizes raw order, user and product documents into one internal shape
before any aggregation runs. All field fallbacks live here:

- order total:        total, then totalAmount, then 0
- item product id:    productId, then product (ObjectId or embedded document)
- item name:          name, then productName, then "Unknown Product"
- item quantity:      quantity, at least 1
- customer name:      customerName, then shippingAddress.fullName
- product stock:      scalar or per-size array, summed
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from src.database.models import UNKNOWN_PRODUCT_NAME, OrderStatus
from src.reporting.parsing import (
    parse_identifier,
    parse_money,
    parse_quantity,
    parse_status,
    parse_text,
    parse_timestamp,
    total_stock,
)

Document = Dict[str, Any]


@dataclass(frozen=True)
class LineItemRecord:
    """Single order line"""
    product_id: Optional[str]
    name: str
    price: float
    quantity: int


@dataclass(frozen=True)
class OrderRecord:
    """Order as seen by the aggregator"""
    order_id: Optional[str]
    order_number: Optional[str]
    user_id: Optional[str]
    status: Optional[str]  # as stored
    canonical_status: Optional[OrderStatus]
    total: float
    created_at: Optional[datetime]
    items: Tuple[LineItemRecord, ...] = ()
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None

    @property
    def item_count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class UserRecord:
    """User account"""
    user_id: Optional[str]
    created_at: Optional[datetime]
    role: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class ProductRecord:
    """Catalog product with stock already totalled"""
    product_id: Optional[str]
    name: str
    price: float
    stock: int
    category: Optional[str] = None


def _as_document(value: Any) -> Document:
    return value if isinstance(value, dict) else {}


def normalize_line_item(doc: Any) -> LineItemRecord:
    doc = _as_document(doc)
    product_id = parse_identifier(doc.get("productId")) or parse_identifier(doc.get("product"))
    name = parse_text(doc.get("name")) or parse_text(doc.get("productName")) or UNKNOWN_PRODUCT_NAME
    return LineItemRecord(
        product_id=product_id,
        name=name,
        price=parse_money(doc.get("price")),
        quantity=parse_quantity(doc.get("quantity")),
    )


def normalize_order(doc: Any) -> OrderRecord:
    """Build an OrderRecord from an order document"""
    doc = _as_document(doc)

    if doc.get("total") is not None:
        total = parse_money(doc.get("total"))
    else:
        total = parse_money(doc.get("totalAmount"))

    raw_items = doc.get("items")
    items = tuple(normalize_line_item(item) for item in raw_items) if isinstance(raw_items, list) else ()

    status = doc.get("status") if isinstance(doc.get("status"), str) else None
    shipping = _as_document(doc.get("shippingAddress"))

    return OrderRecord(
        order_id=parse_identifier(doc.get("_id")),
        order_number=parse_text(doc.get("orderNumber")),
        user_id=parse_identifier(doc.get("userId")),
        status=status,
        canonical_status=parse_status(status),
        total=total,
        created_at=parse_timestamp(doc.get("createdAt")),
        items=items,
        customer_name=parse_text(doc.get("customerName")) or parse_text(shipping.get("fullName")),
        customer_email=parse_text(doc.get("customerEmail")),
    )


def normalize_user(doc: Any) -> UserRecord:
    doc = _as_document(doc)
    return UserRecord(
        user_id=parse_identifier(doc.get("_id")),
        created_at=parse_timestamp(doc.get("createdAt")),
        role=parse_text(doc.get("role")),
        name=parse_text(doc.get("name")),
        email=parse_text(doc.get("email")),
    )


def normalize_product(doc: Any) -> ProductRecord:
    doc = _as_document(doc)
    return ProductRecord(
        product_id=parse_identifier(doc.get("_id")),
        name=parse_text(doc.get("name")) or UNKNOWN_PRODUCT_NAME,
        price=parse_money(doc.get("price")),
        stock=total_stock(doc.get("stock")),
        category=parse_text(doc.get("category")),
    )


def normalize_orders(docs: Iterable[Any]) -> List[OrderRecord]:
    return [normalize_order(doc) for doc in docs]


def normalize_users(docs: Iterable[Any]) -> List[UserRecord]:
    return [normalize_user(doc) for doc in docs]


def normalize_products(docs: Iterable[Any]) -> List[ProductRecord]:
    return [normalize_product(doc) for doc in docs]
