"""
API error hierarchy and the handlers that render every failure as the
standard JSON envelope: {"success": false, "message": "..."}.

Route handlers raise the ApiError subclasses below; anything else that
escapes a handler is logged and reported as a 500.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from expertcheck.config import DIAGNOSTICS_ENABLED
from expertcheck.logging_config import get_logger, log_with_context

logger = get_logger("http")


class ApiError(Exception):
    """Base class for failures that map onto an HTTP status."""
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(ApiError):
    """Missing or malformed request fields."""
    status_code = 400


class ReferenceConflict(ApiError):
    """Dependent rows block a delete."""
    status_code = 400


class Unauthorized(ApiError):
    """Missing, invalid or expired credential."""
    status_code = 401


class Forbidden(ApiError):
    """Authenticated, but the role does not allow the operation."""
    status_code = 403


class NotFound(ApiError):
    """Entity absent or not owned by the caller."""
    status_code = 404


def error_response(status_code: int, message: str, error: dict = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body)


def _validation_message(exc: RequestValidationError) -> str:
    missing = [
        ".".join(str(part) for part in err.get("loc", ())[1:])
        for err in exc.errors()
        if err.get("type") == "missing"
    ]
    if missing:
        return "Missing required fields: {}".format(", ".join(missing))
    first = exc.errors()[0] if exc.errors() else {}
    return "Invalid request: {}".format(first.get("msg", "malformed body"))


def register_exception_handlers(app: FastAPI):
    """Install the envelope handlers on the application."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        level = "WARNING" if exc.status_code < 500 else "ERROR"
        log_with_context(logger, level,
            "{} {} failed: {}".format(request.method, request.url.path, exc.message),
            extra_data={"status_code": exc.status_code})
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return error_response(404, "API route not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        log_with_context(logger, "ERROR",
            "Unhandled error on {} {}: {}".format(request.method, request.url.path, exc),
            extra_data={"exception_type": type(exc).__name__},
            exc_info=True)
        error = None
        if DIAGNOSTICS_ENABLED:
            error = {"type": type(exc).__name__, "detail": str(exc)}
        return error_response(500, "Internal server error", error)
