"""
Public profile schemas.
"""
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator

from marketplace.schemas.auth import check_username
from marketplace.schemas.common import APIModel


class ProfileListing(APIModel):
    id: str
    title: str
    description: str
    price: float
    listing_type: str
    pricing_type: Optional[str] = None
    images: List[str]
    status: str
    location: str
    created_at: datetime


class UserProfile(APIModel):
    id: str
    username: str
    profile_picture: Optional[str] = None
    location: Optional[str] = None
    join_date: datetime
    average_rating: float
    listings: List[ProfileListing] = []


class UserProfileResponse(APIModel):
    user: UserProfile


class ProfileUpdateRequest(APIModel):
    """PATCH body; omitted fields are left untouched, null clears."""

    username: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=100)
    profile_picture: Optional[str] = Field(default=None, max_length=500)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Username cannot be cleared")
        return check_username(v)

    @field_validator("profile_picture")
    @classmethod
    def validate_profile_picture(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        if urlparse(v).scheme not in ("http", "https"):
            raise ValueError("Profile picture URL must use HTTP or HTTPS protocol")
        return v


class ProfileUpdateResponse(APIModel):
    message: str
    user: UserProfile


class AvatarUploadResponse(APIModel):
    message: str
    profile_picture: str
    user: UserProfile
