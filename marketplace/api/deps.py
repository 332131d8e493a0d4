"""
Bearer token authentication dependencies.
"""
from typing import Optional

from fastapi import Depends, Request

from marketplace.core.config import Settings, get_settings
from marketplace.core.errors import AuthenticationFailed
from marketplace.core.logging import get_logger
from marketplace.core.security import TokenPayload, decode_access_token

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


class BearerAuthenticator:
    """
    Dependency class resolving the caller from the Authorization header.

    Errors carry the codes NO_TOKEN, INVALID_TOKEN_FORMAT, INVALID_TOKEN
    and TOKEN_EXPIRED so clients can tell a missing login from a stale one.
    """

    def __call__(
        self,
        request: Request,
        settings: Settings = Depends(get_settings),
    ) -> TokenPayload:
        header: Optional[str] = request.headers.get("Authorization")

        if not header:
            raise AuthenticationFailed(
                "Authentication required. Please provide a valid token.", code="NO_TOKEN"
            )

        if not header.startswith(BEARER_PREFIX):
            raise AuthenticationFailed(
                "Invalid token format. Expected: Bearer <token>", code="INVALID_TOKEN_FORMAT"
            )

        try:
            return decode_access_token(header[len(BEARER_PREFIX):].strip(), settings)
        except AuthenticationFailed as e:
            logger.warning("Rejected bearer token", extra={"extra_data": {"code": e.code, "path": request.url.path}})
            raise


# Dependency instance
require_user = BearerAuthenticator()


async def get_current_user(user: TokenPayload = Depends(require_user)) -> TokenPayload:
    """FastAPI dependency for the authenticated caller."""
    return user
