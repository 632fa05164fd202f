"""Rate Limiting Middleware for FastAPI.

Redis-backed sliding window rate limiting with per-path limits. Public survey
submission, login and password reset are the heavy buckets.
"""

from __future__ import annotations

import time
from typing import Callable

import redis
import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from estimatepro.config import get_config

logger = structlog.get_logger(__name__)

# Requests per minute
DEFAULT_RATE_LIMIT = 60
API_RATE_LIMIT = 120
HEAVY_RATE_LIMIT = 10

RATE_LIMIT_WINDOW = 60

HEAVY_PATHS = ("/api/surveys/", "/api/auth/login", "/api/auth/signup", "/api/auth/password-reset", "/pdf")


def get_redis_client() -> redis.Redis:
    """Get Redis client for rate limiting."""
    return redis.from_url(get_config().auth.redis_url, decode_responses=True)


def get_client_identifier(request: Request) -> str:
    """Client IP, honouring X-Forwarded-For behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def get_rate_limit_for_path(path: str, method: str = "GET") -> int:
    """Requests per minute allowed for a path."""
    if method != "GET" and any(p in path for p in HEAVY_PATHS):
        return HEAVY_RATE_LIMIT

    if path.startswith("/api/"):
        return API_RATE_LIMIT

    return DEFAULT_RATE_LIMIT


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware that enforces rate limiting on requests.

    Usage:
        app.add_middleware(RateLimitMiddleware)

    Requests pass through unlimited when Redis is unavailable.
    """

    EXEMPT_PATHS = {"/health", "/metrics", "/docs", "/openapi.json", "/favicon.ico"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path

        if any(path.startswith(exempt) for exempt in self.EXEMPT_PATHS):
            return await call_next(request)

        client_id = get_client_identifier(request)
        rate_limit = get_rate_limit_for_path(path, request.method)
        key = f"rate_limit:{client_id}:{request.method}:{path}"
        now = time.time()

        try:
            pipe = get_redis_client().pipeline()
            pipe.zremrangebyscore(key, 0, now - RATE_LIMIT_WINDOW)
            pipe.zadd(key, {str(now): now})
            pipe.zcard(key)
            pipe.expire(key, RATE_LIMIT_WINDOW + 1)
            request_count = pipe.execute()[2]
        except redis.exceptions.RedisError as exc:
            logger.warning("rate_limit_unavailable", error=str(exc))
            return await call_next(request)

        if request_count > rate_limit:
            logger.warning(
                "rate_limit_exceeded",
                client_id=client_id,
                path=path,
                count=request_count,
                limit=rate_limit,
            )
            return JSONResponse(
                status_code=429,
                content={"detail": f"Rate limit exceeded. Try again in {RATE_LIMIT_WINDOW} seconds."},
                headers={
                    "Retry-After": str(RATE_LIMIT_WINDOW),
                    "X-RateLimit-Limit": str(rate_limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(int(now + RATE_LIMIT_WINDOW)),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rate_limit)
        response.headers["X-RateLimit-Remaining"] = str(max(rate_limit - request_count, 0))
        response.headers["X-RateLimit-Reset"] = str(int(now + RATE_LIMIT_WINDOW))
        return response
