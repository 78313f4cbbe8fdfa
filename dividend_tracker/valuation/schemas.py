"""Data models produced by the valuation composer."""

from dataclasses import dataclass

TRAILING_PERIOD = "trailing 12 months"


@dataclass(frozen=True)
class Valuation:
    """Point-in-time valuation of a position in one ticker."""

    ticker: str
    company: str
    shares: int
    price: float
    dividend_yield: float
    annual_dividend: float
    total_value: float
    monthly_dividend: float

    def to_dict(self) -> dict:
        return {
            "ticker": self.ticker,
            "company": self.company,
            "shares": self.shares,
            "price": self.price,
            "dividend_yield": self.dividend_yield,
            "annual_dividend": self.annual_dividend,
            "total_value": self.total_value,
            "monthly_dividend": self.monthly_dividend,
        }


@dataclass(frozen=True)
class DividendInfo:
    """Trailing dividend summary for a symbol, independent of any position."""

    symbol: str
    annual_dividend: float
    stock_price: float
    dividend_yield: float
    dividends_count: int
    evaluated_period: str = TRAILING_PERIOD
