"""
error_handlers.py – the one place raw exceptions become HTTP responses
─────────────────────────────────────────────────────────────────────
• every exception → normalize_error() → AppError
• ≥500 logged as errors (with traceback), <500 as warnings
• body: {"error": CLIENT_ERROR | INTERNAL_SERVER_ERROR, "message", "stack"?}
  – 5xx text is replaced by a generic message in production
  – "stack" is only attached in development
"""
import logging
import traceback

from bson.errors import InvalidId
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from jose import JWTError
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .errors import AppError, ErrorKind, normalize_error

logger = logging.getLogger(__name__)

_MAPPED = (
    AppError, DuplicateKeyError, InvalidId, JWTError,
    ValidationError, RequestValidationError,
)


def register_error_handlers(app: FastAPI) -> None:
    for exc_type in _MAPPED:
        app.add_exception_handler(exc_type, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    # Exception is routed through ServerErrorMiddleware by Starlette
    app.add_exception_handler(Exception, app_error_handler)


async def app_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = normalize_error(exc)
    settings = get_settings()

    extra = {
        "original_message": str(exc),
        "normalized_message": error.message,
        "status_code": error.status_code,
        "method": request.method,
        "path": request.url.path,
    }
    if error.status_code >= 500:
        logger.error("Server error", extra=extra, exc_info=exc)
    else:
        logger.warning("Client error", extra=extra)

    message = error.message
    if error.status_code >= 500 and settings.is_production:
        message = "Internal Server Error"

    body = {
        "error": "INTERNAL_SERVER_ERROR" if error.status_code >= 500 else "CLIENT_ERROR",
        "message": message,
    }
    if settings.is_development:
        body["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )

    headers = None
    if error.kind is ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=error.status_code, content=body, headers=headers)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    """Framework-raised HTTP errors – mostly unmatched routes."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        logger.warning(
            "Route not found",
            extra={"status_code": 404, "method": request.method, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "NOT_FOUND",
                "message": f"Route {request.method} {request.url.path} not found",
            },
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "INTERNAL_SERVER_ERROR" if exc.status_code >= 500 else "CLIENT_ERROR",
            "message": str(exc.detail),
        },
        headers=getattr(exc, "headers", None),
    )
