"""
User profile endpoints, including profile picture upload.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_user
from marketplace.core.config import Settings, get_settings
from marketplace.core.database import get_db
from marketplace.core.security import TokenPayload
from marketplace.schemas.auth import CurrentUserResponse
from marketplace.schemas.common import ErrorResponse
from marketplace.schemas.user import (
    AvatarUploadResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    UserProfileResponse,
)
from marketplace.services import upload_service, user_service

router = APIRouter(prefix="/api/users", tags=["Users"])

DB = Annotated[Session, Depends(get_db)]
CurrentUser = Annotated[TokenPayload, Depends(get_current_user)]


@router.get("/me", response_model=CurrentUserResponse, summary="Identity of the caller")
async def me(user: CurrentUser) -> CurrentUserResponse:
    return CurrentUserResponse(user_id=user.user_id, email=user.email, username=user.username)


@router.get(
    "/{user_id}",
    response_model=UserProfileResponse,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Public profile with active listings",
)
async def get_profile(user_id: str, db: DB) -> UserProfileResponse:
    return UserProfileResponse(user=user_service.get_profile(db, user_id))


@router.patch(
    "/{user_id}",
    response_model=ProfileUpdateResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not your profile"},
        409: {"model": ErrorResponse, "description": "Username taken"},
    },
    summary="Update your profile",
)
async def update_profile(user_id: str, body: ProfileUpdateRequest, user: CurrentUser, db: DB) -> ProfileUpdateResponse:
    profile = user_service.update_profile(db, user.user_id, user_id, body.model_dump(exclude_unset=True))
    return ProfileUpdateResponse(message="Profile updated successfully", user=profile)


@router.post(
    "/{user_id}/avatar",
    response_model=AvatarUploadResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Not an accepted image type"},
        403: {"model": ErrorResponse, "description": "Not your profile"},
        413: {"model": ErrorResponse, "description": "File too large"},
    },
    summary="Upload a profile picture",
    description="Multipart upload in the `profilePicture` field. JPEG, PNG, GIF or WebP up to 5MB.",
)
async def upload_avatar(
    user_id: str,
    user: CurrentUser,
    db: DB,
    settings: Annotated[Settings, Depends(get_settings)],
    profile_picture: Annotated[UploadFile, File(alias="profilePicture")],
) -> AvatarUploadResponse:
    user_service.ensure_owner(user.user_id, user_id)
    # Read one byte past the limit so oversize files are caught without buffering them whole
    data = await profile_picture.read(settings.max_upload_bytes + 1)
    updated = upload_service.store_profile_picture(
        db,
        settings,
        user_id,
        data,
        content_type=profile_picture.content_type,
        original_name=profile_picture.filename,
    )
    return AvatarUploadResponse(
        message="Profile picture uploaded successfully",
        profile_picture=updated.profile_picture,
        user=user_service.build_profile(db, updated),
    )
