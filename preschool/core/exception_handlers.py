"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain error codes and
framework exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from preschool.core.config import get_settings
from preschool.domain.exceptions import PreschoolException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "INVALID_CODE": 400,
    "WEAK_PASSWORD": 400,
    "UNAUTHORIZED": 403,
    "EMAIL_MISMATCH": 403,
    "NOT_FOUND": 404,
    "INVALID_STATE": 409,
    "ALREADY_USED": 409,
    "EMAIL_TAKEN": 409,
    "CONFLICT": 409,
    "EXPIRED": 410,
    "PARTIAL_FAILURE": 500,
    "IDENTITY_PROVIDER_ERROR": 502,
    "PROVIDER_UNAVAILABLE": 503,
}


def status_for(error_code: str) -> int:
    """HTTP status for a domain error code (400 when unmapped)."""
    return _ERROR_CODE_STATUS.get(error_code, 400)


def _preschool_exception_handler(request: Request, exc: PreschoolException) -> JSONResponse:
    """Return JSON from PreschoolException.to_dict() with the mapped status code."""
    status = status_for(exc.error_code)
    if status >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.details)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details (input values stripped)."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "error": "REQUEST_VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": errors},
        },
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail, "details": {}},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail, "details": {}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: PreschoolException (and subclasses), RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(PreschoolException, _preschool_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
