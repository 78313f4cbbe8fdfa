"""
Explicitly constructed service context.

Holds the database pool, market data client, token verifier, and the
holding service built on them. Components receive their dependencies
from here by parameter; there are no module-level singletons for them.

Initialization order: database -> market data client -> verifier ->
services. Shutdown runs in reverse.
"""

import logging
from dataclasses import dataclass
from types import TracebackType

from dividend_tracker.auth.config import AuthConfig
from dividend_tracker.auth.verifier import TokenVerifier, build_verifier
from dividend_tracker.holdings.config import RefreshConfig
from dividend_tracker.holdings.service import HoldingService
from dividend_tracker.market_data.client import MarketDataClient
from dividend_tracker.market_data.config import MarketDataConfig
from dividend_tracker.storage.database import Database

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    database: Database
    market_data: MarketDataClient
    holdings: HoldingService
    verifier: TokenVerifier | None = None

    @classmethod
    async def create(
        cls,
        database: Database | None = None,
        market_data_config: MarketDataConfig | None = None,
        auth_config: AuthConfig | None = None,
        refresh_config: RefreshConfig | None = None,
    ) -> "ServiceContext":
        """Connect the database and open the HTTP client, then wire services."""
        database = database or Database()
        await database.connect()

        market_data = MarketDataClient(market_data_config)
        try:
            await market_data.__aenter__()
        except Exception:
            await database.close()
            raise

        verifier = build_verifier(auth_config or AuthConfig(), market_data.http)
        holdings = HoldingService(database, market_data, refresh_config)

        logger.info("Service context ready")
        return cls(
            database=database,
            market_data=market_data,
            holdings=holdings,
            verifier=verifier,
        )

    async def close(self) -> None:
        await self.market_data.close()
        await self.database.close()
        logger.info("Service context closed")

    async def __aenter__(self) -> "ServiceContext":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
