"""Cached JSON Web Key Set lookup by key id."""

import logging
import time
from typing import Any

import httpx

from dividend_tracker.errors import KeyNotFound, Unauthorized

logger = logging.getLogger(__name__)


class JWKSCache:
    """
    Key set fetched from a JWKS URL and reused for ``ttl_seconds``.

    Static keys can be supplied with ``from_keys`` for tests or for
    deployments that pin their signing keys.

    Example:
        cache = JWKSCache("https://idp.example.com/.well-known/jwks.json", http)
        jwk = await cache.get_key("key-2024-01")
    """

    def __init__(
        self,
        url: str | None = None,
        http: httpx.AsyncClient | None = None,
        ttl_seconds: int = 3600,
        timeout: float = 10.0,
    ):
        self._url = url
        self._http = http
        self._ttl = ttl_seconds
        self._timeout = timeout
        self._keys: dict[str, dict[str, Any]] = {}
        self._fetched_at: float | None = None

    @classmethod
    def from_keys(cls, keys: list[dict[str, Any]]) -> "JWKSCache":
        """Build a cache pre-seeded with JWKs that never expire."""
        cache = cls()
        cache._store(keys)
        return cache

    def _store(self, keys: list[dict[str, Any]]) -> None:
        self._keys = {k["kid"]: k for k in keys if isinstance(k, dict) and k.get("kid")}
        self._fetched_at = time.monotonic()

    def _is_stale(self) -> bool:
        if self._url is None:
            return False
        if self._fetched_at is None:
            return True
        return (time.monotonic() - self._fetched_at) >= self._ttl

    async def refresh(self) -> None:
        """Fetch the key set. Any failure is reported as Unauthorized."""
        if self._url is None or self._http is None:
            return
        try:
            response = await self._http.get(self._url, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch JWKS from {self._url}: {e}")
            raise Unauthorized("Unable to load signing keys") from e

        keys = payload.get("keys") if isinstance(payload, dict) else None
        if not isinstance(keys, list):
            raise Unauthorized("Key set response has no keys")
        self._store(keys)
        logger.info(f"Loaded {len(self._keys)} signing keys from JWKS")

    async def get_key(self, kid: str) -> dict[str, Any]:
        """Return the JWK whose ``kid`` matches, or raise KeyNotFound."""
        if self._is_stale():
            await self.refresh()
        key = self._keys.get(kid)
        if key is None:
            raise KeyNotFound(kid)
        return key

    @property
    def key_ids(self) -> list[str]:
        return sorted(self._keys)
