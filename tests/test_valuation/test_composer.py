"""Tests for the valuation composer."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from dividend_tracker.errors import DataUnavailable
from dividend_tracker.market_data.schemas import DividendRecord, QuoteSnapshot
from dividend_tracker.valuation.composer import ValuationComposer

AS_OF = date(2026, 6, 15)

# Four quarterly payments summing to 1.84
KO_HISTORY = [
    DividendRecord(symbol="KO", date="2026-06-01", adj_dividend=0.46),
    DividendRecord(symbol="KO", date="2026-03-01", adj_dividend=0.46),
    DividendRecord(symbol="KO", date="2025-12-01", adj_dividend=0.46),
    DividendRecord(symbol="KO", date="2025-09-01", adj_dividend=0.46),
    DividendRecord(symbol="KO", date="2025-03-01", adj_dividend=0.44),
]


@pytest.fixture
def mock_client() -> AsyncMock:
    client = AsyncMock()
    client.fetch_quote = AsyncMock(
        return_value=QuoteSnapshot(symbol="KO", price=60.0, name="Coca-Cola")
    )
    client.fetch_dividend_history = AsyncMock(return_value=KO_HISTORY)
    client.fetch_profile = AsyncMock(return_value="The Coca-Cola Company")
    return client


class TestCompose:
    @pytest.mark.asyncio
    async def test_ko_scenario(self, mock_client):
        composer = ValuationComposer(mock_client)

        valuation = await composer.compose("ko", 10, as_of=AS_OF)

        assert valuation.ticker == "KO"
        assert valuation.company == "The Coca-Cola Company"
        assert valuation.shares == 10
        assert valuation.price == 60.0
        assert valuation.annual_dividend == pytest.approx(1.84)
        assert valuation.total_value == pytest.approx(600.0)
        assert valuation.monthly_dividend == pytest.approx(1.84 * 10 / 12)
        assert valuation.dividend_yield == 3.06

    @pytest.mark.asyncio
    async def test_zero_dividends_still_values(self, mock_client):
        mock_client.fetch_dividend_history.return_value = []
        composer = ValuationComposer(mock_client)

        valuation = await composer.compose("BRK-B", 3, as_of=AS_OF)

        assert valuation.annual_dividend == 0.0
        assert valuation.dividend_yield == 0.0
        assert valuation.monthly_dividend == 0.0
        assert valuation.total_value == pytest.approx(180.0)

    @pytest.mark.asyncio
    async def test_known_company_skips_profile(self, mock_client):
        composer = ValuationComposer(mock_client)

        valuation = await composer.compose("KO", 1, as_of=AS_OF, company="Coke")

        assert valuation.company == "Coke"
        mock_client.fetch_profile.assert_not_called()

    @pytest.mark.asyncio
    async def test_quote_failure_propagates(self, mock_client):
        mock_client.fetch_quote.side_effect = DataUnavailable("down", symbol="KO")
        composer = ValuationComposer(mock_client)

        with pytest.raises(DataUnavailable):
            await composer.compose("KO", 10)

        mock_client.fetch_dividend_history.assert_not_called()

    @pytest.mark.asyncio
    async def test_dividend_failure_propagates(self, mock_client):
        mock_client.fetch_dividend_history.side_effect = DataUnavailable("down")
        composer = ValuationComposer(mock_client)

        with pytest.raises(DataUnavailable):
            await composer.compose("KO", 10)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("shares", [0, -5, True, 1.5])
    async def test_rejects_invalid_shares(self, mock_client, shares):
        composer = ValuationComposer(mock_client)

        with pytest.raises(ValueError):
            await composer.compose("KO", shares)

        mock_client.fetch_quote.assert_not_called()


class TestDividendInfo:
    @pytest.mark.asyncio
    async def test_summarizes_window(self, mock_client):
        composer = ValuationComposer(mock_client)

        info = await composer.dividend_info("ko", as_of=AS_OF)

        assert info.symbol == "KO"
        assert info.annual_dividend == pytest.approx(1.84)
        assert info.stock_price == 60.0
        assert info.dividend_yield == 3.06
        assert info.dividends_count == 4
        assert info.evaluated_period == "trailing 12 months"
        mock_client.fetch_profile.assert_not_called()
