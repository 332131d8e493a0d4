"""
Registration, email verification, login and password reset.

Emails are not delivered: the verification and reset links are logged so
that a developer can follow them.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from marketplace.core.config import Settings
from marketplace.core.database import utcnow
from marketplace.core.errors import AuthenticationFailed, Conflict, EmailNotVerified, InvalidToken
from marketplace.core.logging import get_logger
from marketplace.core.security import (
    TokenPayload,
    create_access_token,
    generate_token,
    hash_password,
    verify_password,
)
from marketplace.models.user import User
from marketplace.repositories.user_repository import UserRepository

logger = get_logger(__name__)


@dataclass
class LoginResult:
    token: str
    user: User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _log_link(kind: str, email: str, url: str) -> None:
    logger.info(
        f"{kind} link generated",
        extra={"extra_data": {"email": email, "url": url}},
    )


def register_user(
    db: Session,
    settings: Settings,
    email: str,
    username: str,
    password: str,
    location: Optional[str] = None,
) -> User:
    """Create an unverified account and issue a verification token."""
    users = UserRepository(db)
    email = normalize_email(email)
    if users.by_email(email):
        raise Conflict("An account with this email already exists", code="EMAIL_TAKEN")
    if users.by_username(username):
        raise Conflict("This username is already taken", code="USERNAME_TAKEN")

    token = generate_token()
    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password, settings),
        location=location or None,
        email_verified=False,
        email_verification_token=token,
        email_verification_expires=utcnow() + timedelta(hours=settings.verification_token_hours),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User registered", extra={"extra_data": {"user_id": user.id, "username": username}})
    _log_link("Verification", email, f"{settings.frontend_url}/verify-email?token={token}")
    return user


def verify_email(db: Session, token: str) -> User:
    user = db.query(User).filter(User.email_verification_token == token).first()
    if user is None:
        raise InvalidToken("Invalid or expired verification token")
    if user.email_verification_expires is None or user.email_verification_expires < utcnow():
        raise InvalidToken("Verification token has expired", code="TOKEN_EXPIRED")

    user.email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None
    db.commit()
    logger.info("Email verified", extra={"extra_data": {"user_id": user.id}})
    return user


def resend_verification(db: Session, settings: Settings, email: str) -> str:
    """Replace the verification token of an unverified account."""
    user = UserRepository(db).by_email(normalize_email(email))
    if user is None:
        raise InvalidToken("No account found with this email address", code="ACCOUNT_NOT_FOUND")
    if user.email_verified:
        raise Conflict("Email is already verified", code="ALREADY_VERIFIED")

    token = generate_token()
    user.email_verification_token = token
    user.email_verification_expires = utcnow() + timedelta(hours=settings.verification_token_hours)
    db.commit()
    _log_link("Verification", user.email, f"{settings.frontend_url}/verify-email?token={token}")
    return token


def login(db: Session, settings: Settings, email: str, password: str) -> LoginResult:
    """
    Check credentials and issue an access token.

    Unknown email and wrong password give the same error so callers
    cannot probe for accounts.
    """
    user = UserRepository(db).by_email(normalize_email(email))
    if user is None or not user.password_hash:
        raise AuthenticationFailed("Invalid email or password", code="INVALID_CREDENTIALS")
    if not verify_password(password, user.password_hash, settings):
        logger.warning("Failed login attempt", extra={"extra_data": {"user_id": user.id}})
        raise AuthenticationFailed("Invalid email or password", code="INVALID_CREDENTIALS")
    if not user.email_verified:
        raise EmailNotVerified()

    token = create_access_token(TokenPayload(user_id=user.id, email=user.email, username=user.username), settings)
    logger.info("User logged in", extra={"extra_data": {"user_id": user.id}})
    return LoginResult(token=token, user=user)


def request_password_reset(db: Session, settings: Settings, email: str) -> Optional[str]:
    """Issue a reset token for verified accounts; returns None otherwise."""
    user = UserRepository(db).by_email(normalize_email(email))
    if user is None or not user.email_verified:
        logger.info("Password reset requested for unknown or unverified email")
        return None

    token = generate_token()
    user.password_reset_token = token
    user.password_reset_expires = utcnow() + timedelta(hours=settings.password_reset_token_hours)
    db.commit()
    _log_link("Password reset", user.email, f"{settings.frontend_url}/reset-password?token={token}")
    return token


def reset_password(db: Session, settings: Settings, token: str, new_password: str) -> None:
    user = db.query(User).filter(User.password_reset_token == token).first()
    if user is None:
        raise InvalidToken("Invalid or expired password reset token")

    expired = user.password_reset_expires is None or user.password_reset_expires < utcnow()
    user.password_reset_token = None
    user.password_reset_expires = None
    if expired:
        db.commit()
        raise InvalidToken("Password reset token has expired", code="TOKEN_EXPIRED")

    user.password_hash = hash_password(new_password, settings)
    db.commit()
    logger.info("Password reset", extra={"extra_data": {"user_id": user.id}})
