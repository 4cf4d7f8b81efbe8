# phm/core/errors.py
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from phm.core.logging_config import logger
from phm.core.settings import settings
from phm.presentation.cognitive import profile_from_header, soften_error


class AppError(Exception):
    """Base for errors that map 1:1 onto an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def error(self) -> str:
        return type(self).__name__


class ValidationError(AppError):
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: Optional[Any] = None):
        super().__init__(message, details)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "Forbidden", details: Optional[Any] = None):
        super().__init__(message, details)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class ConflictError(AppError):
    status_code = 409


class InvalidTransitionError(ConflictError):
    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            f"Cannot move {entity} from '{current}' to '{target}'",
            details={"from": current, "to": target},
        )


# ----------------------------------------------------
# Handlers
# ----------------------------------------------------
def _error_body(request: Request, error: str, message: str, details: Any = None, **extra) -> dict:
    profile = profile_from_header(request.headers.get("X-Cognitive-Profile"))
    if profile is not None:
        message = soften_error(message, profile)
    body = {"error": error, "message": message}
    if details is not None:
        body["details"] = details
    body.update(extra)
    return body


def _field_path(loc) -> str:
    # ("body", "lines", 0, "quantity") -> "lines.0.quantity"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts) or "request"


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.error, exc.message, exc.details),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": _field_path(e.get("loc", ())), "message": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=_error_body(request, "ValidationError", "Invalid request data", details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content=_error_body(request, "NotFound", "Route not found", path=request.url.path),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, "HTTPException", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content=_error_body(request, "RateLimitExceeded", f"Rate limit exceeded: {exc.detail}"),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", endpoint=request.url.path, method=request.method)
    message = str(exc) if settings.is_development else "An unexpected error occurred"
    return JSONResponse(
        status_code=500,
        content=_error_body(request, "InternalServerError", message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
