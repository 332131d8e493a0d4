"""
Translation of domain errors into HTTP responses.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from marketplace.core import errors
from marketplace.core.logging import get_logger

logger = get_logger(__name__)

STATUS_CODES = {
    errors.UserNotFound: 404,
    errors.ListingNotFound: 404,
    errors.CategoryNotFound: 404,
    errors.MessageNotFound: 404,
    errors.InvalidConversation: 400,
    errors.ValidationFailed: 400,
    errors.InvalidToken: 400,
    errors.InvalidUpload: 400,
    errors.AuthenticationFailed: 401,
    errors.Forbidden: 403,
    errors.EmailNotVerified: 403,
    errors.Conflict: 409,
    errors.UploadTooLarge: 413,
}


def status_for(exc: errors.MarketplaceError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_body(code: str, message: str, details=None) -> dict:
    body = {"code": code, "message": message}
    if details:
        body["details"] = details
    return {"error": body}


async def handle_marketplace_error(request: Request, exc: errors.MarketplaceError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request failed",
        extra={"extra_data": {"path": request.url.path, "status": status_code, "code": exc.code}},
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.code, exc.message, exc.details),
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(errors.MarketplaceError, handle_marketplace_error)
