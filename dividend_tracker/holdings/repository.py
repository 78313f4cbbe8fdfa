"""Database repository for the portfolio_holdings table."""

import logging
import uuid

import asyncpg

from dividend_tracker.errors import Conflict
from dividend_tracker.holdings.schemas import Holding, Scope
from dividend_tracker.storage.database import Database, affected_rows

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS portfolio_holdings (
    id                UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    ticker            TEXT NOT NULL,
    company           TEXT NOT NULL DEFAULT '',
    shares            INTEGER NOT NULL CHECK (shares > 0),
    current_price     DOUBLE PRECISION NOT NULL DEFAULT 0,
    dividend_yield    DOUBLE PRECISION NOT NULL DEFAULT 0,
    total_value       DOUBLE PRECISION NOT NULL DEFAULT 0,
    monthly_dividend  DOUBLE PRECISION NOT NULL DEFAULT 0,
    owner_id          TEXT,
    created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_portfolio_holdings_owner_ticker
    ON portfolio_holdings ((COALESCE(owner_id, '')), ticker);
CREATE INDEX IF NOT EXISTS idx_portfolio_holdings_owner
    ON portfolio_holdings(owner_id);
"""

# $N::text IS NULL lets one statement serve both "all" and single-owner scopes
_SCOPE_FILTER = "($%d::text IS NULL OR owner_id = $%d::text)"

_INSERT_SQL = """
INSERT INTO portfolio_holdings (
    ticker, company, shares, current_price, dividend_yield,
    total_value, monthly_dividend, owner_id
)
VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
RETURNING *
"""

_UPDATE_VALUATION_SQL = f"""
UPDATE portfolio_holdings SET
    shares = $3,
    current_price = $4,
    dividend_yield = $5,
    total_value = $6,
    monthly_dividend = $7,
    updated_at = NOW()
WHERE id = $1 AND {_SCOPE_FILTER % (2, 2)}
RETURNING *
"""


def _record_to_holding(record) -> Holding:
    """Convert an asyncpg Record to a Holding dataclass."""
    return Holding(
        id=str(record["id"]),
        ticker=record["ticker"],
        company=record["company"],
        shares=record["shares"],
        current_price=record["current_price"],
        dividend_yield=record["dividend_yield"],
        total_value=record["total_value"],
        monthly_dividend=record["monthly_dividend"],
        owner_id=record["owner_id"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


def _parse_id(holding_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(holding_id))
    except ValueError:
        return None


class HoldingRepository:
    """CRUD operations for the portfolio_holdings table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the holdings table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Holdings table ensured")

    async def insert(
        self,
        ticker: str,
        company: str,
        shares: int,
        current_price: float,
        dividend_yield: float,
        total_value: float,
        monthly_dividend: float,
        owner_id: str | None = None,
    ) -> Holding:
        """Insert a holding. Raises Conflict if the ticker exists in the scope."""
        try:
            row = await self._db.fetchrow(
                _INSERT_SQL,
                ticker,
                company,
                shares,
                current_price,
                dividend_yield,
                total_value,
                monthly_dividend,
                owner_id,
            )
        except asyncpg.UniqueViolationError as e:
            raise Conflict(f"Holding for {ticker} already exists") from e
        return _record_to_holding(row)

    async def get_by_id(self, holding_id: str, scope: Scope) -> Holding | None:
        """Fetch a holding by id within scope; malformed ids are not found."""
        parsed = _parse_id(holding_id)
        if parsed is None:
            return None
        row = await self._db.fetchrow(
            f"SELECT * FROM portfolio_holdings WHERE id = $1 AND {_SCOPE_FILTER % (2, 2)}",
            parsed,
            scope.owner_id,
        )
        return _record_to_holding(row) if row else None

    async def get_by_ticker(self, ticker: str, scope: Scope) -> Holding | None:
        """Fetch the holding for a ticker owned by exactly this scope's owner."""
        row = await self._db.fetchrow(
            """
            SELECT * FROM portfolio_holdings
            WHERE ticker = $1 AND owner_id IS NOT DISTINCT FROM $2::text
            """,
            ticker,
            scope.owner_id,
        )
        return _record_to_holding(row) if row else None

    async def list(self, scope: Scope) -> list[Holding]:
        """All holdings in scope, ordered by ticker."""
        rows = await self._db.fetch(
            f"""
            SELECT * FROM portfolio_holdings
            WHERE {_SCOPE_FILTER % (1, 1)}
            ORDER BY ticker, created_at
            """,
            scope.owner_id,
        )
        return [_record_to_holding(r) for r in rows]

    async def update_valuation(
        self,
        holding_id: str,
        scope: Scope,
        shares: int,
        current_price: float,
        dividend_yield: float,
        total_value: float,
        monthly_dividend: float,
    ) -> Holding | None:
        """Write shares and valuation fields in one statement.

        Returns the updated holding, or None when no row matched.
        """
        parsed = _parse_id(holding_id)
        if parsed is None:
            return None
        row = await self._db.fetchrow(
            _UPDATE_VALUATION_SQL,
            parsed,
            scope.owner_id,
            shares,
            current_price,
            dividend_yield,
            total_value,
            monthly_dividend,
        )
        return _record_to_holding(row) if row else None

    async def delete(self, holding_id: str, scope: Scope) -> bool:
        """Delete a holding. Returns True if a row was removed."""
        parsed = _parse_id(holding_id)
        if parsed is None:
            return False
        result = await self._db.execute(
            f"DELETE FROM portfolio_holdings WHERE id = $1 AND {_SCOPE_FILTER % (2, 2)}",
            parsed,
            scope.owner_id,
        )
        return affected_rows(result) > 0

    async def count(self, scope: Scope) -> int:
        return await self._db.fetchval(
            f"SELECT COUNT(*) FROM portfolio_holdings WHERE {_SCOPE_FILTER % (1, 1)}",
            scope.owner_id,
        )
