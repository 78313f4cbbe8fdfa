"""Bearer token verification (HMAC secret or RSA key set)."""

from dividend_tracker.auth.config import AuthConfig
from dividend_tracker.auth.keyset import JWKSCache
from dividend_tracker.auth.verifier import (
    AsymmetricKeySet,
    SymmetricKey,
    TokenVerifier,
    VerifiedIdentity,
    build_verifier,
)

__all__ = [
    "AuthConfig",
    "JWKSCache",
    "AsymmetricKeySet",
    "SymmetricKey",
    "TokenVerifier",
    "VerifiedIdentity",
    "build_verifier",
]
