"""
Profile picture storage on the local filesystem.
"""
import secrets
import time
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from marketplace.core.config import Settings
from marketplace.core.errors import InvalidUpload, UploadTooLarge, UserNotFound
from marketplace.core.logging import get_logger
from marketplace.models.user import User

logger = get_logger(__name__)

PROFILE_PICTURES = "profile-pictures"
PUBLIC_PREFIX = f"/uploads/{PROFILE_PICTURES}/"

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


def profile_pictures_dir(settings: Settings) -> Path:
    path = Path(settings.upload_dir) / PROFILE_PICTURES
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_image(content_type: Optional[str], size: int, settings: Settings) -> None:
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidUpload(
            f"Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed. Received: {content_type}"
        )
    if size > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes / (1024 * 1024)
        raise UploadTooLarge(f"File is too large. Maximum size is {limit_mb:g}MB")
    if size == 0:
        raise InvalidUpload("Uploaded file is empty", code="EMPTY_FILE")


def build_filename(user_id: str, original_name: Optional[str], content_type: str) -> str:
    """``{userId}-{millis}-{random}{ext}``; keeps the client's extension when it is an image one."""
    ext = Path(original_name or "").suffix.lower()
    if ext not in IMAGE_EXTENSIONS:
        ext = ALLOWED_IMAGE_TYPES[content_type]
    return f"{user_id}-{int(time.time() * 1000)}-{secrets.token_hex(4)}{ext}"


def delete_stored_picture(url: Optional[str], settings: Settings) -> None:
    """Remove a previously uploaded picture; external URLs are left alone."""
    if not url or not url.startswith(PUBLIC_PREFIX):
        return
    path = profile_pictures_dir(settings) / Path(url[len(PUBLIC_PREFIX):]).name
    try:
        path.unlink(missing_ok=True)
        logger.info("Deleted old profile picture", extra={"extra_data": {"file": path.name}})
    except OSError as e:
        logger.error(f"Error deleting profile picture {path.name}: {e}")


def store_profile_picture(
    db: Session,
    settings: Settings,
    user_id: str,
    data: bytes,
    content_type: Optional[str],
    original_name: Optional[str] = None,
) -> User:
    """Validate and write the image, point the user at it and drop the old one."""
    validate_image(content_type, len(data), settings)
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFound()

    filename = build_filename(user_id, original_name, content_type)
    (profile_pictures_dir(settings) / filename).write_bytes(data)

    previous = user.profile_picture
    user.profile_picture = PUBLIC_PREFIX + filename
    db.commit()
    delete_stored_picture(previous, settings)

    logger.info(
        "Profile picture uploaded",
        extra={"extra_data": {"user_id": user_id, "file": filename, "bytes": len(data)}},
    )
    return user
