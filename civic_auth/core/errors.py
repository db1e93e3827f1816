"""
Application error types and the exception handlers that render them.

Every failure leaves the API as {"success": false, "error": "<message>"}.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

from civic_auth.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationFailed(AppError):
    status_code = 401
    default_message = "Invalid credentials"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class AccountLocked(Forbidden):
    default_message = "Account locked"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Already exists"


class UpstreamError(AppError):
    status_code = 500
    default_message = "Upstream service error"


def error_body(message: str) -> dict:
    return {"success": False, "error": message}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # HTTPBearer reports a missing header as "Not authenticated" (403 on older FastAPI releases)
    if exc.status_code in (401, 403) and "Not authenticated" in str(exc.detail):
        return JSONResponse(status_code=401, content=error_body("Authentication required"))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # Must stay sync: SlowAPIMiddleware calls it without awaiting
    logger.warning("Rate limit exceeded for %s on %s", request.client.host if request.client else "-", request.url.path)
    response = JSONResponse(status_code=429, content=error_body(f"Rate limit exceeded: {exc.detail}"))
    return request.app.state.limiter._inject_headers(response, getattr(request.state, "view_rate_limit", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content=error_body(message))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content=error_body("Internal server error"))
    return JSONResponse(status_code=500, content=error_body(str(exc)))
