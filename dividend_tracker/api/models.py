"""
Request and response models for the dividend tracker API.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(..., description="Error message")
    error_type: str = Field(default="error", description="Error type")


class QuoteResponse(BaseModel):
    symbol: str
    price: str = Field(..., description="Last price formatted to 2 decimals")


class DividendInfoResponse(BaseModel):
    """Trailing dividend summary, formatted for display."""

    symbol: str
    annual_dividend: str = Field(..., description="Sum of trailing dividends, 4 decimals")
    stock_price: str = Field(..., description="Last price, 2 decimals")
    dividend_yield: str = Field(..., description="Yield percentage, e.g. '3.06%'")
    dividends_count: int = Field(..., description="Dividend records in the window")
    evaluated_period: str = Field(default="trailing 12 months")


class ValuationResponse(BaseModel):
    ticker: str
    company: str
    shares: int
    price: float
    dividend_yield: float = Field(..., description="Percentage, not a fraction")
    annual_dividend: float
    total_value: float
    monthly_dividend: float


class HoldingItem(BaseModel):
    """A stored holding with its cached valuation."""

    id: str
    ticker: str
    company: str
    shares: int
    current_price: float
    dividend_yield: float
    total_value: float
    monthly_dividend: float
    created_at: str | None = None
    updated_at: str | None = None


class HoldingsListResponse(BaseModel):
    holdings: list[HoldingItem] = Field(default_factory=list)
    total: int = 0
    total_value: float = Field(default=0.0, description="Sum of holding values")
    monthly_dividend: float = Field(default=0.0, description="Sum of monthly income")


class CreateHoldingRequest(BaseModel):
    ticker: str = Field(..., min_length=1, max_length=16, description="Ticker symbol")
    shares: int = Field(..., gt=0, description="Number of shares held")


class UpdateHoldingRequest(BaseModel):
    shares: int = Field(..., gt=0, description="New share count")


class ReconciliationItem(BaseModel):
    ticker: str
    company: str
    old_price: float
    new_price: float
    old_yield: float
    new_yield: float
    price_changed: bool
    yield_changed: bool
    updated_fields: list[str] = Field(default_factory=list)


class RefreshResponse(BaseModel):
    """Summary of a refresh pass over the caller's holdings."""

    processed: int
    updated: int
    unchanged: int
    failed: list[str] = Field(default_factory=list)
    cancelled: bool = False
    results: list[ReconciliationItem] = Field(default_factory=list)


class ComponentHealth(BaseModel):
    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = None
    details: dict = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="healthy, degraded, or unhealthy")
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
    auth_mode: str | None = Field(default=None, description="Configured token scheme")
    version: str
