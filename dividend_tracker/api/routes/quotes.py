"""Stateless market lookups: quote, trailing dividends, and valuation."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dividend_tracker.api.dependencies import get_holding_service
from dividend_tracker.api.models import (
    DividendInfoResponse,
    ErrorResponse,
    QuoteResponse,
    ValuationResponse,
)
from dividend_tracker.holdings.service import HoldingService

router = APIRouter(prefix="/api")

_ERRORS = {400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/quote",
    response_model=QuoteResponse,
    responses=_ERRORS,
    summary="Latest price for a ticker",
)
async def get_quote(
    symbol: str = Query(..., min_length=1, description="Ticker symbol"),
    service: HoldingService = Depends(get_holding_service),
) -> QuoteResponse:
    try:
        quote = await service.get_quote(symbol)
    except ValueError as e:
        raise _bad_request(e) from e
    return QuoteResponse(symbol=quote.symbol, price=f"{quote.price:.2f}")


@router.get(
    "/dividends",
    response_model=DividendInfoResponse,
    responses=_ERRORS,
    summary="Trailing twelve-month dividends and yield",
)
async def get_dividends(
    symbol: str = Query(..., min_length=1, description="Ticker symbol"),
    service: HoldingService = Depends(get_holding_service),
) -> DividendInfoResponse:
    try:
        info = await service.get_dividend_info(symbol)
    except ValueError as e:
        raise _bad_request(e) from e
    return DividendInfoResponse(
        symbol=info.symbol,
        annual_dividend=f"{info.annual_dividend:.4f}",
        stock_price=f"{info.stock_price:.2f}",
        dividend_yield=f"{info.dividend_yield:.2f}%",
        dividends_count=info.dividends_count,
        evaluated_period=info.evaluated_period,
    )


@router.get(
    "/valuation",
    response_model=ValuationResponse,
    responses=_ERRORS,
    summary="Value a hypothetical position without storing it",
)
async def get_valuation(
    symbol: str = Query(..., min_length=1, description="Ticker symbol"),
    shares: int = Query(..., gt=0, description="Number of shares"),
    service: HoldingService = Depends(get_holding_service),
) -> ValuationResponse:
    try:
        valuation = await service.get_valuation(symbol, shares)
    except ValueError as e:
        raise _bad_request(e) from e
    return ValuationResponse(**valuation.to_dict())
