"""
FastAPI Application Factory

Creates and configures the reporting API application.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from src.config import get_settings
from src.reporting.errors import UpstreamUnavailableError
from src.serving.api.middleware import (
    RequestLoggingMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)
from src.serving.api.routes import (
    health_router,
    reports_router,
    dashboard_router,
    statistics_router,
)

logger = structlog.get_logger(__name__)


async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailableError) -> JSONResponse:
    """Report data could not be read; no partial report is returned."""
    logger.error(
        "Report data source unavailable",
        path=request.url.path,
        error=exc.message,
    )
    return JSONResponse(
        status_code=503,
        content={"success": False, "error": exc.message},
    )


def create_api_app(lifespan: Optional[object] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Optional lifespan context manager (connects MongoDB/Redis)

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="E-Commerce Admin Reporting API",
        description="Sales, inventory, customer and order reports for the admin dashboard",
        version=settings.version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.security.rate_limit_requests,
        window_seconds=settings.security.rate_limit_window_seconds,
    )

    app.add_exception_handler(UpstreamUnavailableError, upstream_unavailable_handler)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["Dashboard"])
    app.include_router(statistics_router, prefix="/api/v1/statistics", tags=["Statistics"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "E-Commerce Admin Reporting API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app
