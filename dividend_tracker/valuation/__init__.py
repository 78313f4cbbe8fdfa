"""Dividend yield calculation and valuation composition."""

from dividend_tracker.valuation.composer import ValuationComposer
from dividend_tracker.valuation.dividends import annual_dividend, yield_percent
from dividend_tracker.valuation.schemas import DividendInfo, Valuation

__all__ = [
    "ValuationComposer",
    "annual_dividend",
    "yield_percent",
    "DividendInfo",
    "Valuation",
]
