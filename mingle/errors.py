"""
Error taxonomy and the single HTTP error boundary.

Services and stores raise ``AppError`` subclasses and let them travel up
unchanged; ``register_error_handlers`` is the only place that turns an
error into a status code and a ``{"timestamp", "message"}`` body.
Anything that is not an ``AppError`` becomes a 500 with a generic
message so internal details never reach the client.
"""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal error"


class AppError(Exception):
    status_code: int = 500
    default_message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "invalid request"


class UnauthorizedError(AppError):
    """Raised for every authentication failure; the message never varies."""

    status_code = 401
    default_message = "user is not authorized"

    def __init__(self) -> None:
        super().__init__()


class ForbiddenError(AppError):
    status_code = 403
    default_message = "access denied"

    def __init__(self) -> None:
        super().__init__()


class NotFoundError(AppError):
    status_code = 404
    default_message = "resource not found"


class InternalServerError(AppError):
    status_code = 500


def error_body(message: str) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "message": message,
    }


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "error parse JSON payload"
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers that shape every error response."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
            message = INTERNAL_ERROR_MESSAGE
        else:
            logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
            message = exc.message
        return JSONResponse(status_code=exc.status_code, content=error_body(message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _validation_message(exc)
        logger.warning("%s %s -> 400: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content=error_body(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("%s %s -> 500: unhandled %s", request.method, request.url.path, type(exc).__name__)
        return JSONResponse(status_code=500, content=error_body(INTERNAL_ERROR_MESSAGE))
