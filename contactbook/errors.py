"""Application error taxonomy and its HTTP rendering."""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that carry a client-safe message and status."""

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message}


class ValidationError(AppError):
    status = HTTPStatus.BAD_REQUEST
    default_message = "invalid request"


class ConflictError(AppError):
    status = HTTPStatus.CONFLICT
    default_message = "resource already exists"


class AuthError(AppError):
    status = HTTPStatus.UNAUTHORIZED
    default_message = "unauthorized"


class NotFoundError(AppError):
    status = HTTPStatus.NOT_FOUND
    default_message = "not found"


class ConfigError(AppError):
    """Required configuration is missing; fatal when raised at startup."""

    default_message = "invalid configuration"


class InternalError(AppError):
    default_message = "internal error"


def _summarise_validation(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "validation failed: " + "; ".join(parts) if parts else "validation failed"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=int(exc.status), content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=int(HTTPStatus.BAD_REQUEST),
        content={"error": _summarise_validation(exc)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s raised an unhandled error", request.method, request.url.path, exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=int(error.status), content=error.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    """Render every failure, expected or not, as ``{"error": ...}``."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
