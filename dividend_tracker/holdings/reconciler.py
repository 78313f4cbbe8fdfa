"""
Holding reconciler.

Re-values a stored holding from fresh market data and persists the result
in a single conditional UPDATE. Two entry points:

- reconcile(): direct path used by create/update. Always writes.
- refresh_holding(): batch path. Writes only when price or yield moved
  by more than the change threshold.
"""

import logging

from dividend_tracker.errors import NotFound
from dividend_tracker.holdings.config import RefreshConfig
from dividend_tracker.holdings.repository import HoldingRepository
from dividend_tracker.holdings.schemas import Holding, ReconciliationResult, Scope
from dividend_tracker.valuation.composer import ValuationComposer
from dividend_tracker.valuation.schemas import Valuation

logger = logging.getLogger(__name__)

# Deltas are compared at this precision so 60.01 - 60.00 reads as exactly 0.01
_DELTA_PRECISION = 9

PRICE_FIELDS = ("current_price", "total_value")
YIELD_FIELDS = ("dividend_yield", "monthly_dividend")
SHARES_FIELDS = ("shares", "total_value", "monthly_dividend")


class ChangeDetector:
    """Absolute-threshold change detection for price and yield."""

    def __init__(self, threshold: float = 0.01):
        self.threshold = threshold

    def changed(self, old: float, new: float) -> bool:
        return round(abs(new - old), _DELTA_PRECISION) > self.threshold

    def compare(
        self, holding: Holding, valuation: Valuation
    ) -> ReconciliationResult:
        """Build a result describing how ``valuation`` differs from ``holding``."""
        price_changed = self.changed(holding.current_price, valuation.price)
        yield_changed = self.changed(holding.dividend_yield, valuation.dividend_yield)

        fields: list[str] = []
        if price_changed:
            fields.extend(PRICE_FIELDS)
        if yield_changed:
            fields.extend(YIELD_FIELDS)
        if holding.shares != valuation.shares:
            fields.extend(SHARES_FIELDS)

        return ReconciliationResult(
            ticker=holding.ticker,
            company=valuation.company,
            old_price=holding.current_price,
            new_price=valuation.price,
            old_yield=holding.dividend_yield,
            new_yield=valuation.dividend_yield,
            price_changed=price_changed,
            yield_changed=yield_changed,
            updated_fields=list(dict.fromkeys(fields)),
        )


class HoldingReconciler:
    """Applies fresh valuations to stored holdings."""

    def __init__(
        self,
        repository: HoldingRepository,
        composer: ValuationComposer,
        config: RefreshConfig | None = None,
    ):
        self._repo = repository
        self._composer = composer
        self._detector = ChangeDetector((config or RefreshConfig()).change_threshold)

    @property
    def detector(self) -> ChangeDetector:
        return self._detector

    async def reconcile(
        self, holding_id: str, current_shares: int, scope: Scope
    ) -> ReconciliationResult:
        """Re-value a holding for ``current_shares`` and write it unconditionally.

        Raises:
            NotFound: holding absent, outside scope, or removed before the write
            DataUnavailable: quote or dividend history could not be fetched
        """
        holding = await self._repo.get_by_id(holding_id, scope)
        if holding is None:
            raise NotFound(f"Holding {holding_id} not found")

        valuation = await self._composer.compose(
            holding.ticker, current_shares, company=holding.company
        )
        result = self._detector.compare(holding, valuation)
        result.holding = await self._write(holding.id, scope, valuation)
        return result

    async def refresh_holding(self, holding: Holding) -> ReconciliationResult:
        """Re-value a holding at its stored share count, writing only on change."""
        valuation = await self._composer.compose(
            holding.ticker, holding.shares, company=holding.company
        )
        result = self._detector.compare(holding, valuation)

        if result.changed:
            scope = Scope(owner_id=holding.owner_id)
            result.holding = await self._write(holding.id, scope, valuation)
            logger.info(
                f"Updated {holding.ticker}: price {holding.current_price} -> "
                f"{valuation.price}, yield {holding.dividend_yield} -> "
                f"{valuation.dividend_yield}"
            )
        else:
            result.holding = holding
        return result

    async def _write(self, holding_id: str, scope: Scope, valuation: Valuation) -> Holding:
        updated = await self._repo.update_valuation(
            holding_id,
            scope,
            shares=valuation.shares,
            current_price=valuation.price,
            dividend_yield=valuation.dividend_yield,
            total_value=valuation.total_value,
            monthly_dividend=valuation.monthly_dividend,
        )
        if updated is None:
            raise NotFound(f"Holding {holding_id} not found")
        return updated
