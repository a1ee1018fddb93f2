"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain, console and
framework exceptions to JSON error responses of the same shape:
{"error": code, "message": text, "details": {...}}.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scopegate.core.config import get_settings
from scopegate.domain.exceptions import ScopeGateException

logger = logging.getLogger(__name__)

# Map error_code to HTTP status; anything unlisted is a 400.
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "INVALID_SCOPE": 400,
    "MISSING_CONTEXT": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "ORGANIZATION_ACCESS_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "ROLE_NOT_FOUND": 404,
    "ASSIGNMENT_NOT_FOUND": 404,
    "DUPLICATE_ROLE": 409,
    "DUPLICATE_PERMISSION": 409,
    "DUPLICATE_EMAIL": 409,
    "SYSTEM_ROLE_PROTECTED": 409,
    "CONSOLE_API_ERROR": 502,
    "CONSOLE_UNAVAILABLE": 503,
    "SQL_NOT_CONFIGURED": 503,
}


def status_for(exc: ScopeGateException) -> int:
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _scopegate_exception_handler(
    request: Request, exc: ScopeGateException
) -> JSONResponse:
    """Return JSON from ScopeGateException.to_dict() with the mapped status code."""
    status = status_for(exc)
    if status >= 500:
        logger.warning("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: ScopeGateException (and subclasses, console errors included),
    RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(ScopeGateException, _scopegate_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
