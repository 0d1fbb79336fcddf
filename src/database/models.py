"""
Document Models

Vocabulary of the documents stored in the admin database. The collections are
owned by the storefront and the admin CRUD screens; this service only reads
them, so the models here describe the shapes it has to understand:

Orders:
    _id, orderNumber, userId, status, total (legacy: totalAmount), createdAt,
    items[] {productId | product, name | productName, price, quantity},
    customerName, customerEmail, shippingAddress {fullName, ...}

Users:
    _id, firebaseUid, email, name, role, createdAt

Products:
    _id, name, price, category, stock (integer or per-size integer array)
"""

from enum import Enum
from typing import Dict


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Canonical order status"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out for delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class UserRole(str, Enum):
    """User role"""
    CUSTOMER = "customer"
    ADMIN = "admin"


# Statuses written by older storefront releases
LEGACY_STATUS_ALIASES: Dict[str, OrderStatus] = {
    "completed": OrderStatus.DELIVERED,
    "paid": OrderStatus.PROCESSING,
    "confirmed": OrderStatus.PROCESSING,
}

# Orders whose revenue counts as a sale
FULFILLED_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.SHIPPED})

# Orders still waiting on the warehouse or the courier
OPEN_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.OUT_FOR_DELIVERY,
})

UNKNOWN_PRODUCT_NAME = "Unknown Product"
NOT_AVAILABLE = "N/A"
