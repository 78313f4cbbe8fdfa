"""Holding service: the operations exposed to the API and CLI."""

import asyncio
import logging

from dividend_tracker.errors import Conflict, NotFound
from dividend_tracker.holdings.config import RefreshConfig
from dividend_tracker.holdings.reconciler import HoldingReconciler
from dividend_tracker.holdings.refresh import RefreshOrchestrator
from dividend_tracker.holdings.repository import HoldingRepository
from dividend_tracker.holdings.schemas import Holding, RefreshSummary, Scope
from dividend_tracker.market_data.client import MarketDataClient, normalize_symbol
from dividend_tracker.market_data.schemas import QuoteSnapshot
from dividend_tracker.storage.database import Database
from dividend_tracker.valuation.composer import ValuationComposer
from dividend_tracker.valuation.schemas import DividendInfo, Valuation

logger = logging.getLogger(__name__)


def _validate_shares(shares: int) -> None:
    if isinstance(shares, bool) or not isinstance(shares, int) or shares <= 0:
        raise ValueError("shares must be a positive integer")


class HoldingService:
    """Portfolio operations over the holdings store and market data.

    Single-holding operations propagate the first error they hit; no
    partial holding state is written.
    """

    def __init__(
        self,
        database: Database,
        client: MarketDataClient,
        config: RefreshConfig | None = None,
    ) -> None:
        self._config = config or RefreshConfig()
        self._client = client
        self._repo = HoldingRepository(database)
        self._composer = ValuationComposer(client)
        self._reconciler = HoldingReconciler(self._repo, self._composer, self._config)
        self._orchestrator = RefreshOrchestrator(
            self._repo, self._reconciler, self._config
        )

    @property
    def repository(self) -> HoldingRepository:
        """Access the underlying repository for direct DB operations."""
        return self._repo

    @property
    def composer(self) -> ValuationComposer:
        return self._composer

    async def create_holding(self, ticker: str, shares: int, scope: Scope) -> Holding:
        """Register a new position and store its initial valuation.

        Raises:
            Conflict: the scope already holds this ticker
            DataUnavailable: the initial valuation could not be fetched
        """
        ticker = normalize_symbol(ticker)
        _validate_shares(shares)

        if await self._repo.get_by_ticker(ticker, scope) is not None:
            raise Conflict(f"Holding for {ticker} already exists")

        valuation = await self._composer.compose(ticker, shares)
        holding = await self._repo.insert(
            ticker=valuation.ticker,
            company=valuation.company,
            shares=valuation.shares,
            current_price=valuation.price,
            dividend_yield=valuation.dividend_yield,
            total_value=valuation.total_value,
            monthly_dividend=valuation.monthly_dividend,
            owner_id=scope.owner_id,
        )
        logger.info(f"Created holding {holding.id} for {ticker} ({shares} shares)")
        return holding

    async def list_holdings(self, scope: Scope) -> list[Holding]:
        return await self._repo.list(scope)

    async def update_shares(self, holding_id: str, shares: int, scope: Scope) -> Holding:
        """Change the share count and re-value the holding."""
        _validate_shares(shares)
        result = await self._reconciler.reconcile(holding_id, shares, scope)
        return result.holding

    async def delete_holding(self, holding_id: str, scope: Scope) -> None:
        if not await self._repo.delete(holding_id, scope):
            raise NotFound(f"Holding {holding_id} not found")
        logger.info(f"Deleted holding {holding_id}")

    async def refresh(
        self, scope: Scope, cancel_event: asyncio.Event | None = None
    ) -> RefreshSummary:
        return await self._orchestrator.refresh_all(scope, cancel_event)

    async def get_valuation(self, ticker: str, shares: int) -> Valuation:
        """Stateless valuation; nothing is persisted."""
        return await self._composer.compose(ticker, shares)

    async def get_quote(self, ticker: str) -> QuoteSnapshot:
        return await self._client.fetch_quote(ticker)

    async def get_dividend_info(self, ticker: str) -> DividendInfo:
        return await self._composer.dividend_info(ticker)
