"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dividend_tracker import __version__
from dividend_tracker.api.middleware.timeout import TimeoutMiddleware
from dividend_tracker.api.routes import health, holdings, quotes
from dividend_tracker.config.settings import get_settings
from dividend_tracker.context import ServiceContext
from dividend_tracker.errors import (
    Conflict,
    DataUnavailable,
    DividendTrackerError,
    NotFound,
    Unauthorized,
)
from dividend_tracker.observability.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)

# Domain error -> (HTTP status, error_type)
_ERROR_STATUS: dict[type[DividendTrackerError], tuple[int, str]] = {
    DataUnavailable: (502, "data_unavailable"),
    NotFound: (404, "not_found"),
    Conflict: (409, "conflict"),
    Unauthorized: (401, "unauthorized"),
}


def create_app(context: ServiceContext | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        context: Prebuilt service context. When omitted, the lifespan
            handler builds one on startup and closes it on shutdown.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Dividend tracker API starting up")
        owns_context = context is None
        if owns_context:
            app.state.context = await ServiceContext.create()

        yield

        logger.info("Dividend tracker API shutting down")
        if owns_context:
            await app.state.context.close()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "market", "description": "Quotes, dividends, and stateless valuation"},
        {"name": "portfolio", "description": "Holdings and refresh, bearer auth"},
    ]

    app = FastAPI(
        title="Dividend Tracker API",
        description="""
Portfolio valuation and dividend income tracking backed by Financial Modeling Prep.

## Authentication

Portfolio endpoints require `Authorization: Bearer <jwt>`.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )
    app.state.context = context

    # Add CORS middleware (origins from CORS_ORIGINS env var, comma-separated)
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    if settings.request_timeout_seconds > 0:
        app.add_middleware(
            TimeoutMiddleware,
            timeout_seconds=settings.request_timeout_seconds,
        )

    # Request logging and correlation ID middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        bind_context(request_id=request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            clear_context()

    @app.exception_handler(DividendTrackerError)
    async def domain_exception_handler(request: Request, exc: DividendTrackerError):
        status_code, error_type = 500, "internal"
        for error_cls, mapping in _ERROR_STATUS.items():
            if isinstance(exc, error_cls):
                status_code, error_type = mapping
                break
        logger.info(
            "Request failed",
            path=request.url.path,
            error_type=error_type,
            detail=exc.message,
        )
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "error_type": error_type},
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(quotes.router, tags=["market"])
    app.include_router(holdings.router, tags=["portfolio"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Dividend Tracker API",
            "version": __version__,
            "docs": "/docs",
        }

    return app
