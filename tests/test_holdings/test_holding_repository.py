"""Tests for HoldingRepository."""

import uuid
from unittest.mock import AsyncMock

import asyncpg
import pytest

from dividend_tracker.errors import Conflict
from dividend_tracker.holdings.repository import HoldingRepository
from dividend_tracker.holdings.schemas import Scope

HOLDING_ID = "6f1c2b7e-8d4a-4c1e-9a52-3b7d0e9f1a24"


class TestCreateTable:
    @pytest.mark.asyncio
    async def test_creates_table_and_scope_unique_index(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)

        await repo.create_table()

        sql = mock_database.execute.call_args[0][0]
        assert "CREATE TABLE IF NOT EXISTS portfolio_holdings" in sql
        assert "gen_random_uuid()" in sql
        assert "COALESCE(owner_id, '')" in sql


class TestInsert:
    @pytest.mark.asyncio
    async def test_returns_holding(self, mock_database: AsyncMock, sample_db_row: dict):
        repo = HoldingRepository(mock_database)
        mock_database.fetchrow.return_value = sample_db_row

        holding = await repo.insert(
            ticker="KO",
            company="The Coca-Cola Company",
            shares=10,
            current_price=60.0,
            dividend_yield=3.06,
            total_value=600.0,
            monthly_dividend=1.5333,
            owner_id="user-1",
        )

        args = mock_database.fetchrow.call_args[0]
        assert "INSERT INTO portfolio_holdings" in args[0]
        assert args[1:] == ("KO", "The Coca-Cola Company", 10, 60.0, 3.06, 600.0, 1.5333, "user-1")
        assert holding.id == HOLDING_ID
        assert holding.ticker == "KO"
        assert holding.owner_id == "user-1"

    @pytest.mark.asyncio
    async def test_unique_violation_raises_conflict(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)
        mock_database.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")

        with pytest.raises(Conflict, match="KO"):
            await repo.insert("KO", "Coca-Cola", 10, 60.0, 3.06, 600.0, 1.53)


class TestGetById:
    @pytest.mark.asyncio
    async def test_scoped_lookup(self, mock_database: AsyncMock, sample_db_row: dict):
        repo = HoldingRepository(mock_database)
        mock_database.fetchrow.return_value = sample_db_row

        holding = await repo.get_by_id(HOLDING_ID, Scope.for_owner("user-1"))

        args = mock_database.fetchrow.call_args[0]
        assert "owner_id = $2" in args[0]
        assert args[1] == uuid.UUID(HOLDING_ID)
        assert args[2] == "user-1"
        assert holding is not None
        assert holding.shares == 10

    @pytest.mark.asyncio
    async def test_all_scope_passes_null_owner(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)

        result = await repo.get_by_id(HOLDING_ID, Scope.everyone())

        assert result is None
        assert mock_database.fetchrow.call_args[0][2] is None

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)

        assert await repo.get_by_id("not-a-uuid", Scope.everyone()) is None
        mock_database.fetchrow.assert_not_called()


class TestGetByTicker:
    @pytest.mark.asyncio
    async def test_matches_exact_owner(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)

        await repo.get_by_ticker("KO", Scope())

        args = mock_database.fetchrow.call_args[0]
        assert "IS NOT DISTINCT FROM" in args[0]
        assert args[1:] == ("KO", None)


class TestList:
    @pytest.mark.asyncio
    async def test_ordered_by_ticker(self, mock_database: AsyncMock, sample_db_row: dict):
        repo = HoldingRepository(mock_database)
        mock_database.fetch.return_value = [sample_db_row]

        holdings = await repo.list(Scope.for_owner("user-1"))

        sql = mock_database.fetch.call_args[0][0]
        assert "ORDER BY ticker" in sql
        assert len(holdings) == 1
        assert holdings[0].ticker == "KO"


class TestUpdateValuation:
    @pytest.mark.asyncio
    async def test_single_conditional_update(self, mock_database: AsyncMock, sample_db_row: dict):
        repo = HoldingRepository(mock_database)
        mock_database.fetchrow.return_value = sample_db_row

        holding = await repo.update_valuation(
            HOLDING_ID,
            Scope.for_owner("user-1"),
            shares=10,
            current_price=61.0,
            dividend_yield=3.01,
            total_value=610.0,
            monthly_dividend=1.53,
        )

        args = mock_database.fetchrow.call_args[0]
        assert args[0].strip().startswith("UPDATE portfolio_holdings")
        assert "WHERE id = $1" in args[0]
        assert args[1:] == (uuid.UUID(HOLDING_ID), "user-1", 10, 61.0, 3.01, 610.0, 1.53)
        assert holding is not None

    @pytest.mark.asyncio
    async def test_no_row_returns_none(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)
        mock_database.fetchrow.return_value = None

        result = await repo.update_valuation(HOLDING_ID, Scope(), 1, 1.0, 0.0, 1.0, 0.0)

        assert result is None


class TestDelete:
    @pytest.mark.asyncio
    async def test_deleted(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)
        mock_database.execute.return_value = "DELETE 1"

        assert await repo.delete(HOLDING_ID, Scope.for_owner("user-1")) is True

    @pytest.mark.asyncio
    async def test_zero_rows_is_false(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)
        mock_database.execute.return_value = "DELETE 0"

        assert await repo.delete(HOLDING_ID, Scope.for_owner("user-2")) is False

    @pytest.mark.asyncio
    async def test_malformed_id_is_false(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)

        assert await repo.delete("123", Scope()) is False
        mock_database.execute.assert_not_called()



class TestCount:
    @pytest.mark.asyncio
    async def test_count_all(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)
        mock_database.fetchval.return_value = 4

        assert await repo.count(Scope.everyone()) == 4
        assert mock_database.fetchval.call_args.args[1] is None

    @pytest.mark.asyncio
    async def test_count_for_owner(self, mock_database: AsyncMock):
        repo = HoldingRepository(mock_database)
        mock_database.fetchval.return_value = 2

        assert await repo.count(Scope.for_owner("user-1")) == 2
        assert mock_database.fetchval.call_args.args[1] == "user-1"


class TestScope:
    def test_everyone_is_all(self):
        assert Scope.everyone().is_all is True

    def test_owner_scope_is_not_all(self):
        assert Scope.for_owner("user-1").is_all is False
