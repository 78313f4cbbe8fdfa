"""
Bearer token verification.

The verification key is a tagged variant chosen from configuration:

- SymmetricKey: a shared secret, HS256/HS384/HS512 only.
- AsymmetricKeySet: RSA public keys looked up by the token's ``kid``
  header in a JWKSCache, RS256/RS384/RS512 only.

Every failure raises Unauthorized (KeyNotFound for an unknown ``kid``).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx
from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JOSEError, JWTClaimsError

from dividend_tracker.auth.config import AuthConfig
from dividend_tracker.auth.keyset import JWKSCache
from dividend_tracker.errors import KeyNotFound, Unauthorized
from dividend_tracker.observability.metrics import get_metrics

logger = logging.getLogger(__name__)

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
RSA_ALGORITHMS = ("RS256", "RS384", "RS512")


@dataclass(frozen=True)
class VerifiedIdentity:
    """Claims exposed to authorization once a token is verified."""

    subject: str
    email: str = ""
    role: str = ""
    expires_at: datetime | None = None


@dataclass(frozen=True)
class SymmetricKey:
    secret: str
    algorithms: tuple[str, ...] = HMAC_ALGORITHMS

    async def resolve(self, header: dict[str, Any]) -> Any:
        return self.secret


@dataclass(frozen=True)
class AsymmetricKeySet:
    keys: JWKSCache
    algorithms: tuple[str, ...] = RSA_ALGORITHMS

    async def resolve(self, header: dict[str, Any]) -> Any:
        kid = header.get("kid")
        if not kid:
            raise Unauthorized("Token header has no kid")
        return await self.keys.get_key(kid)


VerificationKey = SymmetricKey | AsymmetricKeySet


def _reject(reason: str, message: str) -> Unauthorized:
    get_metrics().record_auth_failure(reason)
    return Unauthorized(message)


class TokenVerifier:
    """Verifies signed JWTs against one configured key variant."""

    def __init__(self, key: VerificationKey, audience: str | None = None):
        self._key = key
        self._audience = audience

    @property
    def key(self) -> VerificationKey:
        return self._key

    async def verify(self, token: str) -> VerifiedIdentity:
        if not token:
            raise _reject("missing", "Missing bearer token")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise _reject("malformed", "Malformed token") from e

        algorithm = header.get("alg")
        if algorithm not in self._key.algorithms:
            raise _reject("algorithm", f"Unexpected signing algorithm: {algorithm}")

        try:
            signing_key = await self._key.resolve(header)
        except KeyNotFound:
            get_metrics().record_auth_failure("key_not_found")
            raise
        except Unauthorized as e:
            raise _reject("key", e.message) from e

        try:
            claims = jwt.decode(
                token,
                signing_key,
                algorithms=[algorithm],
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except ExpiredSignatureError as e:
            raise _reject("expired", "Token has expired") from e
        except JWTClaimsError as e:
            raise _reject("claims", f"Invalid token claims: {e}") from e
        except JWTError as e:
            raise _reject("signature", "Invalid token signature") from e
        except JOSEError as e:
            # JWKError: the key behind this kid cannot verify this algorithm.
            raise _reject("key", f"Signing key does not fit token: {e}") from e

        subject = claims.get("sub")
        if not subject:
            raise _reject("claims", "Token has no subject")

        expires_at = None
        if isinstance(claims.get("exp"), (int, float)):
            expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)

        return VerifiedIdentity(
            subject=str(subject),
            email=str(claims.get("email") or ""),
            role=str(claims.get("role") or ""),
            expires_at=expires_at,
        )


def build_verifier(
    config: AuthConfig, http: httpx.AsyncClient | None = None
) -> TokenVerifier | None:
    """Build the verifier for the configured mode, or None if unconfigured."""
    if not config.is_configured:
        logger.warning(f"Token verification not configured for mode {config.mode!r}")
        return None

    if config.mode == "symmetric":
        key: VerificationKey = SymmetricKey(config.jwt_secret)
    else:
        key = AsymmetricKeySet(
            JWKSCache(config.jwks_url, http, ttl_seconds=config.jwks_ttl_seconds)
        )
    return TokenVerifier(key, audience=config.audience)
