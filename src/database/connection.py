"""
Database Connection Management

Async MongoDB client lifecycle built on PyMongo's native asyncio driver.
Implements client pooling, health checks, and graceful shutdown.
"""

import time
from typing import Optional

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from src.config import get_settings

logger = structlog.get_logger(__name__)

# Global client and database handle
_client: Optional[AsyncMongoClient] = None
_database: Optional[AsyncDatabase] = None


async def init_database() -> AsyncDatabase:
    """
    Initialize the MongoDB client.

    Returns:
        AsyncDatabase: The configured database handle
    """
    global _client, _database

    if _database is not None:
        logger.warning("Database already initialized")
        return _database

    settings = get_settings()

    _client = AsyncMongoClient(
        settings.mongo.uri.get_secret_value(),
        serverSelectionTimeoutMS=settings.mongo.server_selection_timeout_ms,
        maxPoolSize=settings.mongo.max_pool_size,
        tz_aware=True,
        appname=settings.app_name,
    )
    _database = _client[settings.mongo.database]

    # Verify connection
    try:
        await _database.command("ping")
        logger.info(
            "Database connection established",
            database=settings.mongo.database,
        )
    except PyMongoError as e:
        # The client keeps reconnecting in the background
        logger.error("Failed to connect to database", error=str(e))
        raise

    return _database


async def close_database() -> None:
    """Close the MongoDB client and its connection pool."""
    global _client, _database

    if _client is not None:
        await _client.close()
        _client = None
        _database = None
        logger.info("Database client closed")


def get_database() -> AsyncDatabase:
    """
    Get the database handle.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _database is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _database


async def check_database_health() -> dict:
    """
    Check database health status.

    Returns:
        dict: Health status with latency information
    """
    try:
        database = get_database()
        start = time.perf_counter()
        await database.command("ping")
        latency_ms = (time.perf_counter() - start) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
            "database": database.name,
        }
    except (PyMongoError, RuntimeError) as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
