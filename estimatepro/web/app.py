"""FastAPI application for EstiMate Pro - builder dashboard, public survey and admin API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from estimatepro import __version__
from estimatepro.core.logging import configure_logging
from estimatepro.db.connection import close_db
from estimatepro.web.rate_limit import RateLimitMiddleware
from estimatepro.web.routes import (
    account,
    admin,
    auth,
    dashboard,
    health,
    leads,
    pricing,
    quotes,
    surveys,
)

configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_db()


app = FastAPI(
    title="EstiMate Pro API",
    description="Bathroom renovation estimates, leads and quotes for builders",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        structlog.contextvars.clear_contextvars()

        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("request_failed", error=str(exc))
            raise

        logger.info("request_completed", status_code=response.status_code)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# Prometheus Metrics
Instrumentator().instrument(app).expose(app)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Follow redirect-style exceptions; render everything else as JSON."""
    if exc.status_code in [301, 302, 303, 307, 308] and exc.headers and "Location" in exc.headers:
        return RedirectResponse(url=exc.headers["Location"], status_code=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(account.router)
app.include_router(pricing.router)
app.include_router(dashboard.router)
app.include_router(leads.router)
app.include_router(quotes.router)
app.include_router(surveys.router)
app.include_router(admin.router)


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=204)
