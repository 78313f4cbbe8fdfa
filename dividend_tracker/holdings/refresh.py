"""Batch refresh of every holding in a scope."""

import asyncio
import logging
import time

import asyncpg

from dividend_tracker.errors import DataUnavailable, NotFound
from dividend_tracker.holdings.config import RefreshConfig
from dividend_tracker.holdings.reconciler import HoldingReconciler
from dividend_tracker.holdings.repository import HoldingRepository
from dividend_tracker.holdings.schemas import RefreshSummary, Scope
from dividend_tracker.observability.metrics import get_metrics

logger = logging.getLogger(__name__)

# Errors confined to a single holding; anything else aborts the pass
_PER_HOLDING_ERRORS = (DataUnavailable, NotFound, ValueError, asyncpg.PostgresError)


class RefreshOrchestrator:
    """Refreshes holdings one at a time with a fixed pause between them.

    A failure on one holding is logged and recorded in the summary's
    ``failed`` list; the pass continues with the next holding. Setting
    ``cancel_event`` stops the pass before the next holding starts.
    """

    def __init__(
        self,
        repository: HoldingRepository,
        reconciler: HoldingReconciler,
        config: RefreshConfig | None = None,
    ):
        self._repo = repository
        self._reconciler = reconciler
        self._config = config or RefreshConfig()

    async def refresh_all(
        self,
        scope: Scope,
        cancel_event: asyncio.Event | None = None,
    ) -> RefreshSummary:
        metrics = get_metrics()
        started = time.monotonic()

        holdings = await self._repo.list(scope)
        holdings.sort(key=lambda h: h.ticker)
        logger.info(
            f"Refreshing {len(holdings)} holdings "
            f"(scope={'all' if scope.is_all else scope.owner_id})"
        )

        summary = RefreshSummary()
        for index, holding in enumerate(holdings):
            if index > 0 and self._config.delay_seconds > 0:
                await asyncio.sleep(self._config.delay_seconds)

            # Checked after the pause so a cancel during it skips this holding.
            if cancel_event is not None and cancel_event.is_set():
                summary.cancelled = True
                logger.info(f"Refresh cancelled before {holding.ticker}")
                break

            try:
                result = await self._reconciler.refresh_holding(holding)
            except _PER_HOLDING_ERRORS as e:
                logger.warning(f"Failed to refresh {holding.ticker}: {e}")
                summary.failed.append(holding.ticker)
                metrics.record_refresh_outcome("failed")
                continue

            summary.processed += 1
            summary.results.append(result)
            if result.changed:
                summary.updated += 1
                metrics.record_refresh_outcome("updated")
            else:
                metrics.record_refresh_outcome("unchanged")

        summary.results.sort(key=lambda r: r.ticker)
        metrics.record_refresh_duration(time.monotonic() - started)
        logger.info(
            f"Refresh complete: processed={summary.processed} "
            f"updated={summary.updated} unchanged={summary.unchanged} "
            f"failed={len(summary.failed)}"
        )
        return summary
