"""Dividend tracker: portfolio valuation and reconciliation against FMP market data."""

__version__ = "0.1.0"
