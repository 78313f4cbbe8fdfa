"""
API authentication using ``Authorization: Bearer <jwt>``.

Portfolio endpoints resolve the caller's identity here and scope every
holding operation to the token subject. Rejections raise Unauthorized and
are rendered by the app's domain error handler as a 401 with
``WWW-Authenticate: Bearer``.
"""

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dividend_tracker.api.dependencies import get_verifier
from dividend_tracker.auth.verifier import TokenVerifier, VerifiedIdentity
from dividend_tracker.errors import Unauthorized
from dividend_tracker.holdings.schemas import Scope
from dividend_tracker.observability.logging import bind_context

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: TokenVerifier | None = Depends(get_verifier),
) -> VerifiedIdentity:
    """
    Verify the bearer token and return the caller's identity.

    Raises:
        Unauthorized: if the token is missing, invalid, or authentication
            is not configured
    """
    if verifier is None:
        raise Unauthorized("Authentication is not configured")

    if credentials is None or not credentials.credentials:
        raise Unauthorized("Missing bearer token")

    try:
        identity = await verifier.verify(credentials.credentials)
    except Unauthorized as e:
        logger.info("Token rejected", reason=e.message)
        raise

    bind_context(user_id=identity.subject)
    return identity


async def get_scope(identity: VerifiedIdentity = Depends(verify_token)) -> Scope:
    """Holding scope for the authenticated caller."""
    return Scope.for_owner(identity.subject)
