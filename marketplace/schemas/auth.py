"""
Request/response schemas for registration, login and token flows.
"""
import re
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from marketplace.schemas.common import APIModel

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,20}$")
SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")


def check_username(v: str) -> str:
    if not USERNAME_PATTERN.match(v):
        raise ValueError("Username must be 3-20 characters of letters, numbers, and underscores")
    return v


def check_password_strength(v: str) -> str:
    """Raise ValueError naming the first rule the password breaks."""
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters")
    if len(v) > 72:
        raise ValueError("Password must be at most 72 characters")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one number")
    if not SPECIAL_CHARACTERS.search(v):
        raise ValueError("Password must contain at least one special character")
    return v


class RegisterRequest(APIModel):
    email: EmailStr = Field(..., max_length=255)
    username: str
    password: str
    location: Optional[str] = Field(default=None, max_length=100)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "jane@example.com",
                "username": "jane_doe",
                "password": "Str0ng!Pass",
                "location": "Berlin",
            }
        }
    }

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return check_username(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class EmailRequest(APIModel):
    email: EmailStr


class ResetPasswordRequest(APIModel):
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)


class AccountResponse(APIModel):
    """Private view of the authenticated user's own account."""

    id: str
    email: str
    username: str
    email_verified: bool
    location: Optional[str] = None
    profile_picture: Optional[str] = None
    join_date: datetime


class RegisterResponse(APIModel):
    message: str
    user: AccountResponse


class LoginResponse(APIModel):
    token: str
    user: AccountResponse


class CurrentUserResponse(APIModel):
    user_id: str
    email: str
    username: str
