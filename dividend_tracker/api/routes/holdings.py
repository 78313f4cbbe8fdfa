"""Portfolio endpoints, scoped to the authenticated caller."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status

from dividend_tracker.api.auth import get_scope
from dividend_tracker.api.dependencies import get_holding_service
from dividend_tracker.api.models import (
    CreateHoldingRequest,
    ErrorResponse,
    HoldingItem,
    HoldingsListResponse,
    ReconciliationItem,
    RefreshResponse,
    UpdateHoldingRequest,
)
from dividend_tracker.holdings.schemas import Holding, Scope
from dividend_tracker.holdings.service import HoldingService

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/portfolio")


def _holding_to_item(h: Holding) -> HoldingItem:
    return HoldingItem(
        id=h.id,
        ticker=h.ticker,
        company=h.company,
        shares=h.shares,
        current_price=h.current_price,
        dividend_yield=h.dividend_yield,
        total_value=h.total_value,
        monthly_dividend=h.monthly_dividend,
        created_at=h.created_at.isoformat() if h.created_at else None,
        updated_at=h.updated_at.isoformat() if h.updated_at else None,
    )


@router.get(
    "",
    response_model=HoldingsListResponse,
    responses={401: {"model": ErrorResponse}},
    summary="List the caller's holdings",
)
async def list_holdings(
    scope: Scope = Depends(get_scope),
    service: HoldingService = Depends(get_holding_service),
) -> HoldingsListResponse:
    holdings = await service.list_holdings(scope)
    return HoldingsListResponse(
        holdings=[_holding_to_item(h) for h in holdings],
        total=len(holdings),
        total_value=sum(h.total_value for h in holdings),
        monthly_dividend=sum(h.monthly_dividend for h in holdings),
    )


@router.post(
    "",
    response_model=HoldingItem,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Register a holding and fetch its initial valuation",
)
async def create_holding(
    body: CreateHoldingRequest,
    scope: Scope = Depends(get_scope),
    service: HoldingService = Depends(get_holding_service),
) -> HoldingItem:
    try:
        holding = await service.create_holding(body.ticker, body.shares, scope)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    logger.info("Holding created", holding_id=holding.id, ticker=holding.ticker)
    return _holding_to_item(holding)


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Refresh cached valuations for the caller's holdings",
)
async def refresh_holdings(
    scope: Scope = Depends(get_scope),
    service: HoldingService = Depends(get_holding_service),
) -> RefreshResponse:
    summary = await service.refresh(scope)
    return RefreshResponse(
        processed=summary.processed,
        updated=summary.updated,
        unchanged=summary.unchanged,
        failed=summary.failed,
        cancelled=summary.cancelled,
        results=[ReconciliationItem(**r.to_dict()) for r in summary.results],
    )


@router.put(
    "/{holding_id}",
    response_model=HoldingItem,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Change a holding's share count and re-value it",
)
async def update_holding(
    holding_id: str,
    body: UpdateHoldingRequest,
    scope: Scope = Depends(get_scope),
    service: HoldingService = Depends(get_holding_service),
) -> HoldingItem:
    holding = await service.update_shares(holding_id, body.shares, scope)
    return _holding_to_item(holding)


@router.delete(
    "/{holding_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Remove a holding",
)
async def delete_holding(
    holding_id: str,
    scope: Scope = Depends(get_scope),
    service: HoldingService = Depends(get_holding_service),
) -> Response:
    await service.delete_holding(holding_id, scope)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
