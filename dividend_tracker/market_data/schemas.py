"""Data models for market data records."""

from dataclasses import dataclass
from enum import Enum


class FetchPolicy(str, Enum):
    """How an upstream failure is handled for one kind of call."""

    REQUIRED = "required"
    BEST_EFFORT = "best_effort"


@dataclass(frozen=True)
class QuoteSnapshot:
    """Latest price for a symbol. Fetched fresh per valuation."""

    symbol: str
    price: float
    name: str = ""


@dataclass(frozen=True)
class DividendRecord:
    """One historical dividend payment as reported by FMP.

    Dates are kept as the raw strings FMP returns; the yield calculator
    parses ``date`` and skips records it cannot read.
    """

    symbol: str
    date: str
    adj_dividend: float
    dividend: float = 0.0
    label: str = ""
    record_date: str = ""
    payment_date: str = ""
    declaration_date: str = ""

    @classmethod
    def from_fmp(cls, symbol: str, item: dict) -> "DividendRecord":
        return cls(
            symbol=symbol,
            date=str(item.get("date") or ""),
            adj_dividend=float(item.get("adjDividend") or 0.0),
            dividend=float(item.get("dividend") or 0.0),
            label=str(item.get("label") or ""),
            record_date=str(item.get("recordDate") or ""),
            payment_date=str(item.get("paymentDate") or ""),
            declaration_date=str(item.get("declarationDate") or ""),
        )
