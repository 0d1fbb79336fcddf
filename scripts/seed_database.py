#!/usr/bin/env python
"""
Development Database Seeder

Fills the admin database with synthetic users, products and orders.

Usage:
    python scripts/seed_database.py --users 200 --products 50 --orders 1000
    python scripts/seed_database.py --drop
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import get_settings  # noqa: E402
from src.config.logging import configure_logging, get_logger  # noqa: E402
from src.data.generators import DocumentGenerator  # noqa: E402
from src.database.connection import close_database, init_database  # noqa: E402

logger = get_logger(__name__)


async def seed(n_users: int, n_products: int, n_orders: int, drop: bool, seed_value: int) -> None:
    settings = get_settings()

    try:
        # A failed ping leaves the client open; the finally block closes it
        database = await init_database()
        collections = {
            "users": database[settings.mongo.users_collection],
            "products": database[settings.mongo.products_collection],
            "orders": database[settings.mongo.orders_collection],
        }

        if drop:
            for name, collection in collections.items():
                await collection.drop()
                logger.info("Dropped collection", collection=name)

        data = DocumentGenerator(seed=seed_value).generate_all(
            n_users=n_users,
            n_products=n_products,
            n_orders=n_orders,
        )

        for name, documents in data.items():
            if documents:
                await collections[name].insert_many(documents)
            logger.info("Inserted documents", collection=name, count=len(documents))

        logger.info("Database seeding completed successfully!")
    finally:
        await close_database()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the admin database with synthetic data")
    parser.add_argument("--users", type=int, default=200, help="Number of users (default: 200)")
    parser.add_argument("--products", type=int, default=50, help="Number of products (default: 50)")
    parser.add_argument("--orders", type=int, default=1000, help="Number of orders (default: 1000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--drop", action="store_true", help="Drop the collections first")

    args = parser.parse_args()

    configure_logging()
    asyncio.run(seed(args.users, args.products, args.orders, args.drop, args.seed))
