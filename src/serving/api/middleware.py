"""
API Middleware

- RequestLoggingMiddleware: request id bound to the structlog context,
  one log line per request with its duration
- RateLimitMiddleware: per-client sliding window, health checks exempt
- SecurityHeadersMiddleware: fixed response headers, report payloads
  never cached by browsers or proxies
"""

import asyncio
import time
import uuid
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Tuple

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cache-Control": "no-store",
}

EXEMPT_PATH_PREFIXES: Tuple[str, ...] = ("/api/v1/health",)


def _client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id and log each request once it has been answered"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "Request handled",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
            query=request.url.query or None,
            client=_client_address(request),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    At most max_requests per client address within window_seconds.

    State lives in the worker process; each worker enforces its own limit.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 60,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()

    async def _admit(self, client: str) -> Tuple[bool, int]:
        """Record a hit if the client is under its limit; returns (admitted, remaining)"""
        now = time.monotonic()
        async with self._lock:
            hits = self._hits[client]
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return False, 0
            hits.append(now)
            return True, self.max_requests - len(hits)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(EXEMPT_PATH_PREFIXES):
            return await call_next(request)

        client = _client_address(request)
        admitted, remaining = await self._admit(client)
        limit_headers = {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(remaining),
        }

        if not admitted:
            logger.warning("Rate limit exceeded", client=client, limit=self.max_requests)
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Rate limit exceeded"},
                headers={"Retry-After": str(self.window_seconds), **limit_headers},
            )

        response = await call_next(request)
        response.headers.update(limit_headers)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Apply SECURITY_HEADERS to every response"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response
