"""
Error responses for the API.

Maps each registry error kind to an HTTP status and the common error body::

    {"error": {"type": ..., "message": ..., "detail": ...}}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config_registry.core.exceptions import (
    ConfigRegistryError,
    InvalidConfigurationError,
    InvalidModificationError,
    NotFoundError,
    ObjectExistsError,
    SessionResolutionError,
    StorageError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

# status code and error type per error kind; first isinstance match wins
ERROR_STATUS: list[tuple[type[ConfigRegistryError], int, str]] = [
    (NotFoundError, 404, "not_found"),
    (InvalidConfigurationError, 400, "invalid_configuration"),
    (InvalidModificationError, 400, "invalid_modification"),
    (ObjectExistsError, 409, "conflict"),
    (UnauthorizedError, 403, "unauthorized"),
    (SessionResolutionError, 401, "authentication_required"),
    (StorageError, 500, "storage_failure"),
]


def status_for(exc: ConfigRegistryError) -> tuple[int, str]:
    for error_class, status_code, error_type in ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code, error_type
    return 500, "internal_error"


def error_body(error_type: str, message: str, detail: Any = None) -> dict[str, Any]:
    return {"error": {"type": error_type, "message": message, "detail": detail}}


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers translating errors into JSON responses."""

    @app.exception_handler(ConfigRegistryError)
    async def registry_error_handler(request: Request, exc: ConfigRegistryError) -> JSONResponse:
        status_code, error_type = status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return JSONResponse(
            status_code=status_code,
            content=error_body(error_type, exc.message, exc.details or None),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = {
            ".".join(str(loc) for loc in error["loc"]): error["msg"] for error in exc.errors()
        }
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", "Request validation failed", {"fields": fields}),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content=error_body("internal_error", "An unexpected error occurred"),
        )
