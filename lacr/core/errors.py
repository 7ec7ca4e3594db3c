"""
Error taxonomy - every failure a request can end in.

Services raise these; the handlers registered in lacr.main turn them into
JSON responses of the form {"success": false, "error": "<message>"}.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("lacr.errors")

GENERIC_ERROR = "Something went wrong!"


# ---------------------------------------------------------------------------
# EXCEPTION CLASSES
# ---------------------------------------------------------------------------

class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content={"success": False, "error": self.message},
        )


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(AppError):
    """Bad or missing credential (token, password, PIN)."""
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(AppError):
    """Known identifier in the wrong permission state."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(AppError):
    """Unknown identifier, or one the caller may not see."""
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    """Duplicate unique key."""
    status_code = status.HTTP_409_CONFLICT


class Internal(AppError):
    """Unexpected failure; the message shown to callers stays generic."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# ---------------------------------------------------------------------------
# HANDLERS
# ---------------------------------------------------------------------------

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        # Internal details stay in the log; callers get the generic message
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            exc_info=exc,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": GENERIC_ERROR},
        )
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return exc.to_response()


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/query validation failures are ValidationError (400), not FastAPI's 422."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"

    details = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")}
        for err in errors
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": message, "details": details},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = "Route not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": message},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": GENERIC_ERROR},
    )
