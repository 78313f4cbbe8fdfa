"""
Async client for the Financial Modeling Prep v3 API.

Three calls are exposed: quote, company profile, and dividend history.
Each call runs under a fixed timeout and is never retried. Failure
handling is declared per call with a FetchPolicy:

- REQUIRED: any transport error, non-200 status, undecodable body,
  FMP ``{"Error Message": ...}`` payload, or empty result raises
  DataUnavailable.
- BEST_EFFORT: the same failures return a declared fallback value.
"""

import logging
import time
from typing import Any

import httpx

from dividend_tracker.errors import DataUnavailable
from dividend_tracker.market_data.config import MarketDataConfig
from dividend_tracker.market_data.schemas import (
    DividendRecord,
    FetchPolicy,
    QuoteSnapshot,
)
from dividend_tracker.observability.metrics import get_metrics

logger = logging.getLogger(__name__)

def normalize_symbol(symbol: str) -> str:
    """Uppercase and strip a ticker, rejecting blanks."""
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise ValueError("symbol must be a non-empty string")
    return normalized


class MarketDataClient:
    """
    FMP client owning a single httpx.AsyncClient.

    Example:
        async with MarketDataClient() as client:
            quote = await client.fetch_quote("ko")
            history = await client.fetch_dividend_history("KO")
    """

    def __init__(
        self,
        config: MarketDataConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._config = config or MarketDataConfig()
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "MarketDataClient":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout_seconds)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def http(self) -> httpx.AsyncClient:
        """The shared httpx client (also used for JWKS fetches)."""
        if self._client is None:
            raise RuntimeError("MarketDataClient must be used as async context manager")
        return self._client

    async def _call(
        self,
        endpoint: str,
        path: str,
        symbol: str,
        policy: FetchPolicy = FetchPolicy.REQUIRED,
        fallback: Any = None,
    ) -> Any:
        """Run one upstream call under ``policy``."""
        try:
            return await self._get_json(endpoint, path, symbol)
        except DataUnavailable as e:
            if policy is FetchPolicy.REQUIRED:
                raise
            logger.debug(f"{endpoint} lookup degraded to fallback: {e.message}")
            get_metrics().record_market_data_request(endpoint, "fallback")
            return fallback

    async def _get_json(self, endpoint: str, path: str, symbol: str) -> Any:
        """GET ``path`` and decode JSON, raising DataUnavailable on any failure."""
        if not self._config.api_key:
            raise DataUnavailable("FMP API key is not configured", symbol=symbol)

        url = f"{self._config.base_url.rstrip('/')}/{path}"
        started = time.monotonic()
        try:
            response = await self.http.get(
                url,
                params={"apikey": self._config.api_key},
                timeout=self._config.timeout_seconds,
            )
        except httpx.HTTPError as e:
            get_metrics().record_market_data_request(
                endpoint, "error", time.monotonic() - started
            )
            raise DataUnavailable(
                f"{endpoint} request for {symbol} failed: {e}", symbol=symbol
            ) from e

        get_metrics().record_market_data_request(
            endpoint,
            "success" if response.status_code == 200 else "error",
            time.monotonic() - started,
        )

        if response.status_code != 200:
            raise DataUnavailable(
                f"{endpoint} request for {symbol} returned status "
                f"{response.status_code}",
                symbol=symbol,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise DataUnavailable(
                f"{endpoint} response for {symbol} is not valid JSON", symbol=symbol
            ) from e

        if isinstance(payload, dict) and "Error Message" in payload:
            raise DataUnavailable(
                f"FMP error for {symbol}: {payload['Error Message']}", symbol=symbol
            )
        return payload

    async def fetch_quote(self, symbol: str) -> QuoteSnapshot:
        """Fetch the latest price. Raises DataUnavailable on zero results."""
        symbol = normalize_symbol(symbol)
        payload = await self._call("quote", f"quote/{symbol}", symbol)

        if not isinstance(payload, list) or not payload:
            raise DataUnavailable(f"No quote data for {symbol}", symbol=symbol)

        item = payload[0]
        try:
            price = float(item["price"])
        except (KeyError, TypeError, ValueError) as e:
            raise DataUnavailable(
                f"Quote for {symbol} has no usable price", symbol=symbol
            ) from e

        return QuoteSnapshot(
            symbol=str(item.get("symbol") or symbol),
            price=price,
            name=str(item.get("name") or ""),
        )

    async def fetch_profile(self, symbol: str) -> str:
        """Fetch the company name, falling back to the symbol itself."""
        symbol = normalize_symbol(symbol)
        payload = await self._call(
            "profile",
            f"profile/{symbol}",
            symbol,
            policy=FetchPolicy.BEST_EFFORT,
            fallback=[],
        )

        name = ""
        if isinstance(payload, list) and payload and isinstance(payload[0], dict):
            name = str(payload[0].get("companyName") or "").strip()

        if not name:
            logger.debug(f"Profile for {symbol} has no company name, using symbol")
            return symbol
        return name

    async def fetch_dividend_history(self, symbol: str) -> list[DividendRecord]:
        """Fetch dividend history. An empty history is returned as ``[]``."""
        symbol = normalize_symbol(symbol)
        payload = await self._call(
            "dividends", f"historical-price-full/stock_dividend/{symbol}", symbol
        )

        # FMP answers with {} for symbols that never paid a dividend
        if not isinstance(payload, dict):
            if payload == []:
                return []
            raise DataUnavailable(
                f"Unexpected dividend payload for {symbol}", symbol=symbol
            )

        historical = payload.get("historical") or []
        records = []
        for item in historical:
            if not isinstance(item, dict):
                continue
            try:
                records.append(DividendRecord.from_fmp(symbol, item))
            except (TypeError, ValueError):
                logger.debug(f"Skipping unreadable dividend record for {symbol}: {item}")
        return records
