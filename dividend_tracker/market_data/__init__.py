"""Market data client for quotes, profiles, and dividend history."""

from dividend_tracker.market_data.client import MarketDataClient, normalize_symbol
from dividend_tracker.market_data.config import MarketDataConfig
from dividend_tracker.market_data.schemas import (
    DividendRecord,
    FetchPolicy,
    QuoteSnapshot,
)

__all__ = [
    "MarketDataClient",
    "MarketDataConfig",
    "normalize_symbol",
    "DividendRecord",
    "FetchPolicy",
    "QuoteSnapshot",
]
