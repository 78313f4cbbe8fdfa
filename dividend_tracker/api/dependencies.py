"""
Dependency injection for FastAPI endpoints.

Everything is read from the ServiceContext stored on ``app.state`` by the
lifespan handler; tests override these functions instead.
"""

from fastapi import HTTPException, Request, status

from dividend_tracker.auth.verifier import TokenVerifier
from dividend_tracker.context import ServiceContext
from dividend_tracker.holdings.service import HoldingService


def get_context(request: Request) -> ServiceContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not initialized",
        )
    return context


def get_holding_service(request: Request) -> HoldingService:
    return get_context(request).holdings


def get_verifier(request: Request) -> TokenVerifier | None:
    return get_context(request).verifier
