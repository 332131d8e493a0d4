"""
Public profiles and profile updates.
"""
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.errors import Conflict, Forbidden, UserNotFound, ValidationFailed
from marketplace.core.logging import get_logger
from marketplace.models.listing import Listing, ListingStatus
from marketplace.models.user import User
from marketplace.repositories.user_repository import UserRepository
from marketplace.schemas.user import ProfileListing, UserProfile

logger = get_logger(__name__)

EDITABLE_FIELDS = ("username", "location", "profile_picture")


def build_profile(db: Session, user: User) -> UserProfile:
    """Profile plus the user's active listings, newest first."""
    listings = (
        db.query(Listing)
        .filter(Listing.seller_id == user.id, Listing.status == ListingStatus.ACTIVE.value)
        .order_by(Listing.created_at.desc(), Listing.id.asc())
        .all()
    )
    profile = UserProfile.model_validate(user)
    profile.listings = [ProfileListing.model_validate(listing) for listing in listings]
    return profile


def get_profile(db: Session, user_id: str) -> UserProfile:
    user = UserRepository(db).get(user_id)
    if user is None:
        raise UserNotFound()
    return build_profile(db, user)


def ensure_owner(requester_id: str, user_id: str) -> None:
    if requester_id != user_id:
        raise Forbidden("You can only modify your own profile")


def update_profile(db: Session, requester_id: str, user_id: str, changes: Dict[str, Any]) -> UserProfile:
    """
    Update username, location and/or profile picture.

    ``changes`` holds only the fields the caller sent; ``None`` clears
    location or picture.
    """
    ensure_owner(requester_id, user_id)
    changes = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
    if not changes:
        raise ValidationFailed("At least one field must be provided", code="NO_UPDATE_DATA")

    users = UserRepository(db)
    user = users.get(user_id)
    if user is None:
        raise UserNotFound()

    username = changes.get("username")
    if username and username != user.username:
        taken = users.by_username(username)
        if taken is not None and taken.id != user.id:
            raise Conflict("This username is already taken", code="USERNAME_TAKEN")

    for key, value in changes.items():
        if key == "location" and value is not None and not value.strip():
            value = None
        setattr(user, key, value)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another rename to the same username
        db.rollback()
        raise Conflict("This username is already taken", code="USERNAME_TAKEN")

    logger.info("Profile updated", extra={"extra_data": {"user_id": user_id, "fields": sorted(changes)}})
    return build_profile(db, user)
