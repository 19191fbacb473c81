"""Uniform response envelope and exception handlers.

Every response body is ``{"success": bool, "message": str, "data": ...}``.
Server-side failures are logged in full and returned with an opaque message.
"""
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from edusphere.core.errors import ServiceError
from edusphere.core.logging import get_logger
from edusphere.infrastructure.store import ConstraintViolation

logger = get_logger(__name__)


def envelope(success: bool, message: str, data: Optional[Any] = None) -> dict:
    return {"success": success, "message": message, "data": data}


def error_response(status_code: int, message: str, error_code: Optional[str] = None) -> JSONResponse:
    body = envelope(False, message)
    if error_code:
        body["error_code"] = error_code
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    """Install envelope-producing handlers for service, storage and framework errors."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            f"Service error: {exc.error_code}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
                "error_code": exc.error_code,
            },
        )
        return error_response(exc.status_code, exc.message, exc.error_code)

    @app.exception_handler(ConstraintViolation)
    async def handle_constraint_violation(request: Request, exc: ConstraintViolation):
        logger.warning(
            f"Constraint violation: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )
        return error_response(409, "Resource already exists", "conflict")

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response(422, "Invalid request payload", "validation_error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(exc.status_code, message)

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {type(exc).__name__}",
            extra={"path": request.url.path, "method": request.method},
            exc_info=exc,
        )
        return error_response(500, "Internal server error", "server_error")
