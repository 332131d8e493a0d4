"""
Domain error kinds.

Services raise these; they know nothing about HTTP. The API layer maps
each class to a status code in ``marketplace.api.errors``.
"""
from typing import List, Optional


class MarketplaceError(Exception):
    """Base class for every error surfaced to callers."""

    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, details: Optional[List[str]] = None):
        self.message = message or self.message
        self.code = code or self.code
        self.details = details or []
        super().__init__(self.message)


class UserNotFound(MarketplaceError):
    code = "USER_NOT_FOUND"
    message = "The specified user does not exist"


class InvalidConversation(MarketplaceError):
    code = "INVALID_CONVERSATION"
    message = "Cannot view conversation with yourself"


class ListingNotFound(MarketplaceError):
    code = "LISTING_NOT_FOUND"
    message = "The specified listing does not exist"


class CategoryNotFound(MarketplaceError):
    code = "CATEGORY_NOT_FOUND"
    message = "The specified category does not exist"


class MessageNotFound(MarketplaceError):
    code = "MESSAGE_NOT_FOUND"
    message = "The specified message does not exist"


class ValidationFailed(MarketplaceError):
    code = "VALIDATION_ERROR"
    message = "Validation failed"


class Forbidden(MarketplaceError):
    code = "FORBIDDEN"
    message = "You are not allowed to perform this action"


class AuthenticationFailed(MarketplaceError):
    code = "AUTHENTICATION_FAILED"
    message = "Authentication failed. Please log in again."


class EmailNotVerified(MarketplaceError):
    code = "EMAIL_NOT_VERIFIED"
    message = "Please verify your email before logging in"


class Conflict(MarketplaceError):
    code = "CONFLICT"
    message = "The resource already exists"


class InvalidToken(MarketplaceError):
    code = "INVALID_TOKEN"
    message = "Invalid or expired token"


class InvalidUpload(MarketplaceError):
    code = "INVALID_FILE_TYPE"
    message = "Only JPEG, PNG, GIF, and WebP images are allowed"


class UploadTooLarge(MarketplaceError):
    code = "FILE_TOO_LARGE"
    message = "File is too large"
