"""Configuration for the FMP market data client."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketDataConfig(BaseSettings):
    """Settings for Financial Modeling Prep access."""

    model_config = SettingsConfigDict(
        env_prefix="FMP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="FMP API key; required calls fail without it",
    )
    base_url: str = Field(
        default="https://financialmodelingprep.com/api/v3",
        description="FMP v3 REST base URL",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Per-call timeout; calls are never retried",
    )
