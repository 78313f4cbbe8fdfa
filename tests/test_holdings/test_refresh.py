"""Tests for the batch refresh orchestrator."""

import asyncio
from unittest.mock import AsyncMock, patch

import asyncpg
import pytest

from dividend_tracker.errors import DataUnavailable
from dividend_tracker.holdings.config import RefreshConfig
from dividend_tracker.holdings.refresh import RefreshOrchestrator
from dividend_tracker.holdings.schemas import ReconciliationResult, Scope

NO_DELAY = RefreshConfig(delay_seconds=0.0)


def _result(ticker: str, changed: bool = False) -> ReconciliationResult:
    return ReconciliationResult(
        ticker=ticker,
        company=f"{ticker} Inc",
        old_price=10.0,
        new_price=11.0 if changed else 10.0,
        old_yield=2.0,
        new_yield=2.0,
        price_changed=changed,
        updated_fields=["current_price", "total_value"] if changed else [],
    )


@pytest.fixture
def holdings(make_holding):
    return [
        make_holding("PEP", id="00000000-0000-0000-0000-000000000003"),
        make_holding("KO", id="00000000-0000-0000-0000-000000000001"),
        make_holding("MO", id="00000000-0000-0000-0000-000000000002"),
    ]


@pytest.fixture
def mock_repo(holdings) -> AsyncMock:
    repo = AsyncMock()
    repo.list = AsyncMock(return_value=list(holdings))
    return repo


@pytest.fixture
def mock_reconciler() -> AsyncMock:
    reconciler = AsyncMock()

    async def refresh_holding(holding):
        return _result(holding.ticker, changed=holding.ticker == "KO")

    reconciler.refresh_holding = AsyncMock(side_effect=refresh_holding)
    return reconciler


class TestRefreshAll:
    @pytest.mark.asyncio
    async def test_summary_counts(self, mock_repo, mock_reconciler):
        orchestrator = RefreshOrchestrator(mock_repo, mock_reconciler, NO_DELAY)

        summary = await orchestrator.refresh_all(Scope.everyone())

        assert summary.processed == 3
        assert summary.updated == 1
        assert summary.unchanged == 2
        assert summary.failed == []
        assert summary.cancelled is False

    @pytest.mark.asyncio
    async def test_processes_in_ticker_order(self, mock_repo, mock_reconciler):
        orchestrator = RefreshOrchestrator(mock_repo, mock_reconciler, NO_DELAY)

        summary = await orchestrator.refresh_all(Scope.everyone())

        called = [c.args[0].ticker for c in mock_reconciler.refresh_holding.call_args_list]
        assert called == ["KO", "MO", "PEP"]
        assert [r.ticker for r in summary.results] == ["KO", "MO", "PEP"]

    @pytest.mark.asyncio
    async def test_passes_scope_to_repository(self, mock_repo, mock_reconciler):
        orchestrator = RefreshOrchestrator(mock_repo, mock_reconciler, NO_DELAY)

        await orchestrator.refresh_all(Scope.for_owner("user-1"))

        mock_repo.list.assert_awaited_once_with(Scope.for_owner("user-1"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            DataUnavailable("quote down", symbol="MO"),
            asyncpg.PostgresError("connection lost"),
        ],
    )
    async def test_one_failure_does_not_abort_batch(self, mock_repo, mock_reconciler, error):
        async def refresh_holding(holding):
            if holding.ticker == "MO":
                raise error
            return _result(holding.ticker)

        mock_reconciler.refresh_holding.side_effect = refresh_holding
        orchestrator = RefreshOrchestrator(mock_repo, mock_reconciler, NO_DELAY)

        summary = await orchestrator.refresh_all(Scope.everyone())

        assert summary.processed == 2
        assert summary.failed == ["MO"]
        assert summary.unchanged == 2
        assert [r.ticker for r in summary.results] == ["KO", "PEP"]

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates(self, mock_repo, mock_reconciler):
        mock_reconciler.refresh_holding.side_effect = KeyError("bug")
        orchestrator = RefreshOrchestrator(mock_repo, mock_reconciler, NO_DELAY)

        with pytest.raises(KeyError):
            await orchestrator.refresh_all(Scope.everyone())

    @pytest.mark.asyncio
    async def test_empty_scope(self, mock_repo, mock_reconciler):
        mock_repo.list.return_value = []
        orchestrator = RefreshOrchestrator(mock_repo, mock_reconciler, NO_DELAY)

        summary = await orchestrator.refresh_all(Scope.for_owner("nobody"))

        assert summary.processed == 0
        assert summary.results == []

    @pytest.mark.asyncio
    async def test_pauses_between_holdings(self, mock_repo, mock_reconciler):
        orchestrator = RefreshOrchestrator(
            mock_repo, mock_reconciler, RefreshConfig(delay_seconds=0.2)
        )

        with patch(
            "dividend_tracker.holdings.refresh.asyncio.sleep", new_callable=AsyncMock
        ) as mock_sleep:
            await orchestrator.refresh_all(Scope.everyone())

        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(0.2)

    @pytest.mark.asyncio
    async def test_cancel_stops_before_next_holding(self, mock_repo, mock_reconciler):
        cancel_event = asyncio.Event()

        async def refresh_holding(holding):
            cancel_event.set()
            return _result(holding.ticker)

        mock_reconciler.refresh_holding.side_effect = refresh_holding
        orchestrator = RefreshOrchestrator(mock_repo, mock_reconciler, NO_DELAY)

        summary = await orchestrator.refresh_all(Scope.everyone(), cancel_event)

        assert summary.cancelled is True
        assert summary.processed == 1
        assert [r.ticker for r in summary.results] == ["KO"]

    @pytest.mark.asyncio
    async def test_cancel_during_pause_skips_next_holding(self, mock_repo, mock_reconciler):
        cancel_event = asyncio.Event()

        async def interrupted_sleep(seconds):
            cancel_event.set()

        orchestrator = RefreshOrchestrator(
            mock_repo, mock_reconciler, RefreshConfig(delay_seconds=0.2)
        )

        with patch(
            "dividend_tracker.holdings.refresh.asyncio.sleep", side_effect=interrupted_sleep
        ):
            summary = await orchestrator.refresh_all(Scope.everyone(), cancel_event)

        assert summary.cancelled is True
        assert summary.processed == 1
        mock_reconciler.refresh_holding.assert_awaited_once()
