"""
Password hashing, one-time tokens and JWT access tokens.
"""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from marketplace.core.config import Settings, get_settings
from marketplace.core.errors import AuthenticationFailed
from marketplace.core.logging import get_logger

logger = get_logger(__name__)


@lru_cache()
def _crypt_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return _crypt_context(settings.bcrypt_rounds).hash(password)


def verify_password(password: str, password_hash: str, settings: Optional[Settings] = None) -> bool:
    settings = settings or get_settings()
    return _crypt_context(settings.bcrypt_rounds).verify(password, password_hash)


def generate_token() -> str:
    """Random 64 hex char token for email verification and password reset."""
    return secrets.token_hex(32)


@dataclass(frozen=True)
class TokenPayload:
    """Identity carried inside an access token."""

    user_id: str
    email: str
    username: str


def _require_secret(settings: Settings) -> str:
    if not settings.is_jwt_secret_configured:
        logger.error("JWT_SECRET environment variable not configured")
        raise RuntimeError("JWT_SECRET environment variable is not set")
    return settings.jwt_secret


def create_access_token(payload: TokenPayload, settings: Optional[Settings] = None) -> str:
    """
    Sign a short-lived access token.

    Args:
        payload: Identity to embed
        settings: Overrides the cached settings (tests)

    Returns:
        Encoded JWT string
    """
    settings = settings or get_settings()
    secret = _require_secret(settings)
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    claims = {
        "userId": payload.user_id,
        "email": payload.email,
        "username": payload.username,
        "sub": payload.user_id,
        "exp": expires,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(claims, secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> TokenPayload:
    """
    Verify signature, expiry, issuer and audience of an access token.

    Raises:
        AuthenticationFailed: ``TOKEN_EXPIRED`` or ``INVALID_TOKEN``
    """
    settings = settings or get_settings()
    secret = _require_secret(settings)
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError:
        raise AuthenticationFailed("Your session has expired. Please log in again.", code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthenticationFailed("Invalid authentication token.", code="INVALID_TOKEN")

    user_id = claims.get("userId")
    if not user_id:
        raise AuthenticationFailed("Invalid authentication token.", code="INVALID_TOKEN")
    return TokenPayload(
        user_id=user_id,
        email=claims.get("email", ""),
        username=claims.get("username", ""),
    )
