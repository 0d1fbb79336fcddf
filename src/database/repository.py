"""
Report Data Source

Read-only access to the orders, users and products collections. Reports
fetch whole collections and filter in memory, so no query pushdown is
needed beyond the user lookup used to enrich recent orders.
"""

from typing import Any, Dict, List, Optional, Protocol

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from src.config import get_settings
from src.reporting.errors import UpstreamUnavailableError

logger = structlog.get_logger(__name__)

Document = Dict[str, Any]


class ReportDataSource(Protocol):
    """Collections a report is built from"""

    async def fetch_orders(self) -> List[Document]:
        ...

    async def fetch_users(self) -> List[Document]:
        ...

    async def fetch_products(self) -> List[Document]:
        ...

    async def fetch_user(self, user_ref: str) -> Optional[Document]:
        ...


class MongoDataSource:
    """
    ReportDataSource backed by MongoDB.

    Any driver error is raised as UpstreamUnavailableError.

    Example:
        source = MongoDataSource(get_database())
        orders = await source.fetch_orders()
    """

    def __init__(self, database: AsyncDatabase):
        settings = get_settings()
        self.database = database
        self.orders = database[settings.mongo.orders_collection]
        self.users = database[settings.mongo.users_collection]
        self.products = database[settings.mongo.products_collection]

    async def _find_all(self, collection) -> List[Document]:
        try:
            documents = await collection.find({}).to_list(length=None)
        except PyMongoError as e:
            logger.error(
                "Collection read failed",
                collection=collection.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise UpstreamUnavailableError(f"Failed to read {collection.name}: {e}") from e

        logger.debug("Collection read", collection=collection.name, documents=len(documents))
        return documents

    async def fetch_orders(self) -> List[Document]:
        return await self._find_all(self.orders)

    async def fetch_users(self) -> List[Document]:
        return await self._find_all(self.users)

    async def fetch_products(self) -> List[Document]:
        return await self._find_all(self.products)

    async def fetch_user(self, user_ref: str) -> Optional[Document]:
        """
        Find the user an order belongs to.

        Orders reference users by identity-provider uid; older orders
        reference the user document id.
        """
        clauses: List[Document] = [{"firebaseUid": user_ref}]
        try:
            clauses.append({"_id": ObjectId(user_ref)})
        except (InvalidId, TypeError):
            pass

        try:
            return await self.users.find_one({"$or": clauses})
        except PyMongoError as e:
            logger.error("User lookup failed", user_ref=user_ref, error=str(e))
            raise UpstreamUnavailableError(f"Failed to look up user {user_ref}: {e}") from e
