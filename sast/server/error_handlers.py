"""Exception handlers mapping the error taxonomy onto HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import (
    AuthorizationFailure,
    ConfigurationFailure,
    DuplicateAccountError,
    SastError,
    ValidationFailure,
)

logger = logging.getLogger("sast.server.error_handlers")

# Most specific first
STATUS_BY_ERROR = (
    (ConfigurationFailure, status.HTTP_400_BAD_REQUEST),
    (ValidationFailure, status.HTTP_400_BAD_REQUEST),
    (DuplicateAccountError, status.HTTP_409_CONFLICT),
    (AuthorizationFailure, status.HTTP_401_UNAUTHORIZED),
)


def status_for(exc: SastError) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def sast_error_handler(request: Request, exc: SastError) -> JSONResponse:
    """
    Handle taxonomy errors.

    The body is ``{"error": message}``, the shape the dashboard client reads.
    """
    code = status_for(exc)
    logger.warning(f"HTTP {code} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=code, content={"error": str(exc)})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing query parameters and the like; reported as a client error."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError):
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs full exception and returns generic error to client.
    """
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )
