"""Data models for holdings and reconciliation results."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Scope:
    """Ownership boundary for holding operations.

    ``owner_id=None`` reaches every holding when reading or refreshing,
    and means "unowned" when creating.
    """

    owner_id: str | None = None

    @classmethod
    def everyone(cls) -> "Scope":
        return cls(owner_id=None)

    @classmethod
    def for_owner(cls, owner_id: str) -> "Scope":
        return cls(owner_id=owner_id)

    @property
    def is_all(self) -> bool:
        return self.owner_id is None


@dataclass
class Holding:
    """A recorded position in one ticker with its cached valuation."""

    id: str
    ticker: str
    company: str
    shares: int
    current_price: float = 0.0
    dividend_yield: float = 0.0
    total_value: float = 0.0
    monthly_dividend: float = 0.0
    owner_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ReconciliationResult:
    """Outcome of re-valuing one holding."""

    ticker: str
    company: str
    old_price: float
    new_price: float
    old_yield: float
    new_yield: float
    price_changed: bool = False
    yield_changed: bool = False
    updated_fields: list[str] = field(default_factory=list)
    holding: Holding | None = field(default=None, repr=False, compare=False)

    @property
    def changed(self) -> bool:
        return self.price_changed or self.yield_changed

    def to_dict(self) -> dict:
        return {
            "ticker": self.ticker,
            "company": self.company,
            "old_price": self.old_price,
            "new_price": self.new_price,
            "old_yield": self.old_yield,
            "new_yield": self.new_yield,
            "price_changed": self.price_changed,
            "yield_changed": self.yield_changed,
            "updated_fields": list(self.updated_fields),
        }


@dataclass
class RefreshSummary:
    """Aggregate report of a batch refresh pass.

    ``processed`` counts holdings whose valuation was evaluated; tickers
    whose fetch or write failed are listed in ``failed`` and are not
    counted as unchanged.
    """

    processed: int = 0
    updated: int = 0
    results: list[ReconciliationResult] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def unchanged(self) -> int:
        return self.processed - self.updated

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "failed": list(self.failed),
            "cancelled": self.cancelled,
            "results": [r.to_dict() for r in self.results],
        }
