"""Configuration for holding reconciliation and batch refresh."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RefreshConfig(BaseSettings):
    """Pacing and change-detection settings for refresh passes."""

    model_config = SettingsConfigDict(
        env_prefix="REFRESH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    delay_seconds: float = Field(
        default=0.2,
        ge=0.0,
        description="Pause between holdings to respect upstream rate limits",
    )
    change_threshold: float = Field(
        default=0.01,
        ge=0.0,
        description="Absolute delta above which price or yield counts as changed",
    )
