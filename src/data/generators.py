"""
Synthetic Document Generator

Generates realistic admin-database documents for development and demos:
- Users with signup dates spread over the last two years
- Products across categories, with scalar or per-size stock
- Orders with line items and realistic status mixes

A share of the documents uses the legacy shapes older storefront releases
wrote (totalAmount instead of total, productName, alias statuses), so the
reports can be exercised against both.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from faker import Faker

Document = Dict[str, Any]


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = {
    "t-shirts": (399, 1499),
    "shirts": (799, 2499),
    "jeans": (1199, 3499),
    "hoodies": (999, 2999),
    "accessories": (199, 999),
}

SIZES = ["S", "M", "L", "XL"]

ORDER_STATUSES = [
    ("pending", 0.08),
    ("processing", 0.08),
    ("shipped", 0.12),
    ("out for delivery", 0.04),
    ("delivered", 0.58),
    ("cancelled", 0.05),
    # Legacy statuses
    ("completed", 0.03),
    ("paid", 0.02),
]

RECENT_ORDER_STATUSES = ["pending", "processing", "shipped", "out for delivery"]


# =============================================================================
# GENERATOR
# =============================================================================

class DocumentGenerator:
    """
    Generate users, products and orders as they are stored in MongoDB.

    Example:
        generator = DocumentGenerator(seed=42)
        data = generator.generate_all(n_users=200, n_products=50, n_orders=1000)
    """

    def __init__(
        self,
        seed: Optional[int] = 42,
        now: Optional[datetime] = None,
        legacy_share: float = 0.1,
    ):
        self.random = random.Random(seed)
        self.fake = Faker()
        if seed is not None:
            self.fake.seed_instance(seed)
        self.now = now or datetime.now(timezone.utc)
        self.legacy_share = legacy_share

    def _is_legacy(self) -> bool:
        return self.random.random() < self.legacy_share

    def _moment_between(self, start: datetime, end: datetime) -> datetime:
        span = (end - start).total_seconds()
        return start + timedelta(seconds=self.random.uniform(0, span))

    def generate_users(self, n: int = 200) -> List[Document]:
        """Generate n users, about 2% of them admins"""
        users = []
        start = self.now - timedelta(days=730)

        for _ in range(n):
            created_at = self._moment_between(start, self.now)
            users.append({
                "_id": ObjectId(),
                "firebaseUid": self.fake.unique.uuid4(),
                "email": self.fake.unique.email(),
                "name": self.fake.name(),
                "phone": self.fake.phone_number(),
                "role": "admin" if self.random.random() < 0.02 else "customer",
                "addresses": [],
                "createdAt": created_at,
                "updatedAt": created_at,
            })

        return users

    def generate_products(self, n: int = 50) -> List[Document]:
        """Generate n products; clothing carries stock per size"""
        products = []

        for i in range(n):
            category = self.random.choice(list(CATEGORIES))
            low, high = CATEGORIES[category]

            if category == "accessories":
                stock: Any = self.random.choice([0, self.random.randint(1, 10), self.random.randint(11, 200)])
            else:
                stock = [self.random.choice([0, 0, self.random.randint(1, 5), self.random.randint(5, 60)]) for _ in SIZES]

            name = f"{self.fake.word().title()} {category.rstrip('s').title()}"
            products.append({
                "_id": ObjectId(),
                "name": name,
                "slug": f"{name.lower().replace(' ', '-')}-{i}",
                "description": self.fake.sentence(nb_words=12),
                "price": round(self.random.uniform(low, high), 2),
                "images": [],
                "category": category,
                "sizes": SIZES if isinstance(stock, list) else [],
                "colors": [self.fake.color_name()],
                "inStock": (sum(stock) if isinstance(stock, list) else stock) > 0,
                "stock": stock,
                "featured": self.random.random() < 0.1,
                "createdAt": self._moment_between(self.now - timedelta(days=365), self.now),
            })

        return products

    def generate_orders(
        self,
        users: List[Document],
        products: List[Document],
        n: int = 1000,
        days: int = 365,
    ) -> List[Document]:
        """Generate n orders placed by the given users over the last `days` days"""
        orders = []
        customers = [u for u in users if u.get("role") == "customer"] or users
        start = self.now - timedelta(days=days)

        for i in range(n):
            user = self.random.choice(customers)
            created_at = self._moment_between(start, self.now)
            legacy = self._is_legacy()

            items = []
            for product in self.random.sample(products, k=min(len(products), self.random.randint(1, 4))):
                item = {
                    "productId": str(product["_id"]),
                    "price": product["price"],
                    "quantity": self.random.choices([1, 2, 3], weights=[0.7, 0.2, 0.1])[0],
                    "size": self.random.choice(SIZES),
                }
                item["productName" if legacy else "name"] = product["name"]
                items.append(item)

            subtotal = round(sum(item["price"] * item["quantity"] for item in items), 2)
            shipping = 0 if subtotal > 999 else 49
            tax = round(subtotal * 0.05, 2)
            total = round(subtotal + shipping + tax, 2)

            if (self.now - created_at).days <= 7:
                status = self.random.choice(RECENT_ORDER_STATUSES)
            else:
                status = self.random.choices(
                    [s[0] for s in ORDER_STATUSES],
                    weights=[s[1] for s in ORDER_STATUSES],
                )[0]

            order = {
                "_id": ObjectId(),
                "orderNumber": f"ORD-{int(created_at.timestamp() * 1000)}-{i:04d}",
                "userId": user["firebaseUid"],
                "status": status,
                "items": items,
                "shippingAddress": {
                    "fullName": user["name"],
                    "addressLine1": self.fake.street_address(),
                    "city": self.fake.city(),
                    "state": self.fake.state(),
                    "postalCode": self.fake.postcode(),
                    "country": "IN",
                },
                "subtotal": subtotal,
                "tax": tax,
                "shipping": shipping,
                "paymentId": f"pay_{self.fake.lexify('??????????')}",
                "paymentStatus": "refunded" if status == "cancelled" else "captured",
                "customerEmail": user["email"],
                "createdAt": created_at,
                "updatedAt": created_at,
            }
            order["totalAmount" if legacy else "total"] = total
            orders.append(order)

        return orders

    def generate_all(
        self,
        n_users: int = 200,
        n_products: int = 50,
        n_orders: int = 1000,
    ) -> Dict[str, List[Document]]:
        """Generate a complete, consistent dataset"""
        users = self.generate_users(n_users)
        products = self.generate_products(n_products)
        orders = self.generate_orders(users, products, n_orders)
        return {"users": users, "products": products, "orders": orders}
