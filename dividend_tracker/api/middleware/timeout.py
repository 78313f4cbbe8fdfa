"""
Per-request deadline for the portfolio API.

Valuation and quote endpoints make live FMP calls; if the provider hangs the
caller gets a 504 in the same ``{"detail", "error_type"}`` shape as every
other API error. Portfolio refresh is paced between holdings and can run for
minutes, so it is exempt along with the health check.
"""

import asyncio
from collections.abc import Iterable

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

DEFAULT_EXEMPT_PATHS = frozenset({"/health", "/api/portfolio/refresh"})


class TimeoutMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        timeout_seconds: float = 30.0,
        exempt_paths: Iterable[str] = DEFAULT_EXEMPT_PATHS,
    ):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.exempt_paths = frozenset(exempt_paths)

    def _deadline_applies(self, request: Request) -> bool:
        return request.url.path.rstrip("/") not in self.exempt_paths

    async def dispatch(self, request: Request, call_next):
        if not self._deadline_applies(request):
            return await call_next(request)

        try:
            return await asyncio.wait_for(call_next(request), self.timeout_seconds)
        except TimeoutError:
            logger.warning(
                "Request exceeded deadline",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query) or None,
                deadline_seconds=self.timeout_seconds,
            )
            return JSONResponse(
                status_code=504,
                content={"detail": "Request timed out", "error_type": "timeout"},
            )
