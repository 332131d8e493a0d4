"""
Registration, login, email verification and password reset endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.core.config import Settings, get_settings
from marketplace.core.database import get_db
from marketplace.schemas.auth import (
    AccountResponse,
    EmailRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
)
from marketplace.schemas.common import ErrorResponse, StatusMessage
from marketplace.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])

DB = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]

RESET_REQUESTED = "If an account exists with this email, a password reset link has been sent"


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Email or username taken"}},
    summary="Create an account",
)
async def register(body: RegisterRequest, db: DB, settings: AppSettings) -> RegisterResponse:
    user = auth_service.register_user(
        db,
        settings,
        email=body.email,
        username=body.username,
        password=body.password,
        location=body.location,
    )
    return RegisterResponse(
        message="Registration successful. Please check your email to verify your account.",
        user=AccountResponse.model_validate(user),
    )


@router.get("/verify-email/{token}", response_model=StatusMessage, summary="Confirm an email address")
async def verify_email(token: str, db: DB) -> StatusMessage:
    auth_service.verify_email(db, token)
    return StatusMessage(message="Email verified successfully. You can now log in.")


@router.post("/resend-verification", response_model=StatusMessage, summary="Issue a new verification link")
async def resend_verification(body: EmailRequest, db: DB, settings: AppSettings) -> StatusMessage:
    auth_service.resend_verification(db, settings, body.email)
    return StatusMessage(message="Verification email sent. Please check your inbox.")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Email not verified"},
    },
    summary="Exchange credentials for an access token",
)
async def login(body: LoginRequest, db: DB, settings: AppSettings) -> LoginResponse:
    result = auth_service.login(db, settings, body.email, body.password)
    return LoginResponse(token=result.token, user=AccountResponse.model_validate(result.user))


@router.post("/reset-password", response_model=StatusMessage, summary="Request a password reset link")
async def request_password_reset(body: EmailRequest, db: DB, settings: AppSettings) -> StatusMessage:
    # Same answer whether or not the account exists
    auth_service.request_password_reset(db, settings, body.email)
    return StatusMessage(message=RESET_REQUESTED)


@router.post("/reset-password/{token}", response_model=StatusMessage, summary="Set a new password")
async def reset_password(token: str, body: ResetPasswordRequest, db: DB, settings: AppSettings) -> StatusMessage:
    auth_service.reset_password(db, settings, token, body.password)
    return StatusMessage(message="Password reset successful. You can now log in with your new password.")
