"""Storage layer - PostgreSQL connection pool."""

from dividend_tracker.storage.database import Database, affected_rows

__all__ = ["Database", "affected_rows"]
