"""Configuration for bearer token verification."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthConfig(BaseSettings):
    """Selects the verification scheme and its key material."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    mode: Literal["symmetric", "asymmetric"] = Field(
        default="symmetric",
        description="symmetric: shared HMAC secret; asymmetric: RSA keys from a JWKS",
    )
    jwt_secret: str | None = Field(
        default=None,
        description="Shared secret for HS256/HS384/HS512 tokens",
    )
    jwks_url: str | None = Field(
        default=None,
        description="Identity provider's published key set",
    )
    audience: str | None = Field(
        default=None,
        description="Expected aud claim; not checked when unset",
    )
    jwks_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="How long a fetched key set is reused",
    )

    @property
    def is_configured(self) -> bool:
        if self.mode == "symmetric":
            return bool(self.jwt_secret)
        return bool(self.jwks_url)
