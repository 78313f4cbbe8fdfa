"""
Valuation composer.

Combines a quote, a dividend history, and a share count into a Valuation.
All monetary arithmetic in the project happens here.
"""

import logging
from datetime import date

from dividend_tracker.market_data.client import MarketDataClient, normalize_symbol
from dividend_tracker.valuation.dividends import (
    annual_dividend,
    records_in_window,
    yield_percent,
)
from dividend_tracker.valuation.schemas import DividendInfo, Valuation

logger = logging.getLogger(__name__)


def position_value(price: float, shares: int) -> float:
    return price * shares


def monthly_income(annual: float, shares: int) -> float:
    return (annual * shares) / 12


class ValuationComposer:
    """Builds valuations from the market data client.

    Quote and dividend-history failures propagate as DataUnavailable.
    The profile lookup is best-effort and skipped when the caller already
    knows the company name.
    """

    def __init__(self, client: MarketDataClient):
        self._client = client

    async def compose(
        self,
        symbol: str,
        shares: int,
        as_of: date | None = None,
        company: str | None = None,
    ) -> Valuation:
        symbol = normalize_symbol(symbol)
        if isinstance(shares, bool) or not isinstance(shares, int) or shares <= 0:
            raise ValueError("shares must be a positive integer")

        quote = await self._client.fetch_quote(symbol)
        history = await self._client.fetch_dividend_history(symbol)

        annual = annual_dividend(history, as_of)
        dividend_yield = yield_percent(annual, quote.price)

        if not company:
            company = await self._client.fetch_profile(symbol)

        valuation = Valuation(
            ticker=symbol,
            company=company,
            shares=shares,
            price=quote.price,
            dividend_yield=dividend_yield,
            annual_dividend=annual,
            total_value=position_value(quote.price, shares),
            monthly_dividend=monthly_income(annual, shares),
        )
        logger.debug(
            f"Composed valuation for {symbol}: price={quote.price} "
            f"annual={annual} yield={dividend_yield}"
        )
        return valuation

    async def dividend_info(self, symbol: str, as_of: date | None = None) -> DividendInfo:
        """Trailing dividend summary for a symbol."""
        symbol = normalize_symbol(symbol)
        quote = await self._client.fetch_quote(symbol)
        history = await self._client.fetch_dividend_history(symbol)

        window = records_in_window(history, as_of)
        annual = sum((r.adj_dividend for r in window), 0.0)

        return DividendInfo(
            symbol=symbol,
            annual_dividend=annual,
            stock_price=quote.price,
            dividend_yield=yield_percent(annual, quote.price),
            dividends_count=len(window),
        )
