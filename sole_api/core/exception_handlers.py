"""Exception handlers producing the API's error envelope.

Every error response has the shape::

    {"error": {"code": ..., "message": ..., "request_id": ..., "details": ...}}

``details`` is only present when there is something to report. Status codes:
400 for validation, 401 authentication, 403 ownership, 404 missing
resources, 409 conflicts, 502 image provider failures and 500 for anything
unexpected. Rate limit rejections are answered by the rate limit middleware
and never reach these handlers.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sole_api.core.errors import (
    AppError,
    AuthenticationAppError,
    ConflictAppError,
    ImageGenerationAppError,
    NotFoundAppError,
    PermissionAppError,
)
from sole_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (AuthenticationAppError, 401),
    (PermissionAppError, 403),
    (NotFoundAppError, 404),
    (ConflictAppError, 409),
    (ImageGenerationAppError, 502),
)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def status_code_for(exc: AppError) -> int:
    """HTTP status for a domain error; 400 when the type isn't mapped."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {
        "code": code,
        "message": message,
        "request_id": get_request_id(),
    }
    if details:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"error": error}),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    # RFC 6750 challenge so clients know to send a bearer token
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return _error_response(status_code, exc.code, exc.message, exc.details, headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies, params and query strings become 400 ``validation_error``."""
    errors = [
        {
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    logger.info(
        "request_validation_failed",
        extra={"request_path": request.url.path, "error_count": len(errors)},
    )
    message = errors[0]["msg"] if errors else "Invalid request"
    return _error_response(400, "validation_error", message, {"errors": errors})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the failure, answer with a generic 500.

    Exception text and tracebacks stay in the logs only.
    """
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    return _error_response(500, "internal_server_error", INTERNAL_ERROR_MESSAGE)


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, general_exception_handler)
