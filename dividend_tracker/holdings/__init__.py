"""Holdings store, reconciliation, and batch refresh."""

from dividend_tracker.holdings.config import RefreshConfig
from dividend_tracker.holdings.reconciler import ChangeDetector, HoldingReconciler
from dividend_tracker.holdings.refresh import RefreshOrchestrator
from dividend_tracker.holdings.repository import HoldingRepository
from dividend_tracker.holdings.schemas import (
    Holding,
    ReconciliationResult,
    RefreshSummary,
    Scope,
)
from dividend_tracker.holdings.service import HoldingService

__all__ = [
    "RefreshConfig",
    "ChangeDetector",
    "HoldingReconciler",
    "RefreshOrchestrator",
    "HoldingRepository",
    "Holding",
    "ReconciliationResult",
    "RefreshSummary",
    "Scope",
    "HoldingService",
]
