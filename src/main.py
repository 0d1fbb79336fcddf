"""
FastAPI Production Application

Main entry point for the E-Commerce Admin Reporting API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from pymongo.errors import PyMongoError
from redis.exceptions import RedisError
import structlog

from src.config import get_settings
from src.config.logging import configure_logging
from src.database.connection import init_database, close_database
from src.serving.api.main import create_api_app
from src.serving.cache import init_redis, close_redis

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging("DEBUG" if settings.debug else None)

    logger.info("Starting E-Commerce Admin Reporting API", environment=settings.app_env)

    # Reports answer 503 until MongoDB is reachable
    try:
        await init_database()
    except PyMongoError as e:
        logger.warning("Database init failed", error=str(e))

    if settings.redis.enabled:
        try:
            await init_redis()
        except RedisError as e:
            logger.warning("Redis init failed, serving reports uncached", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()
    await close_redis()


app = create_api_app(lifespan=lifespan)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
