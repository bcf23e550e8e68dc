"""
Request logging and the exception handlers that turn errors into the JSON
envelope ``{success: false, error: {code, message, details?}, timestamp}``.
"""

import time
import logging
from datetime import datetime
from uuid import uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.exceptions import CheckoutRedirect, DancyMealsError, TenantUnavailableError

logger = logging.getLogger("dancymeals.middleware")

# Seconds a client should wait before retrying a deactivated storefront
UNAVAILABLE_RETRY_AFTER = 3600


def error_body(code: str, message, details=None) -> dict:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {
        "success": False,
        "error": error,
        "timestamp": datetime.utcnow().isoformat(),
    }


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each request with an id, the Host it was sent to and its timing.

    The id and duration are echoed back as ``X-Request-ID`` and
    ``X-Process-Time``.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        logger.info(
            f"request_started id={request_id} method={request.method} "
            f"host={request.headers.get('host')} path={request.url.path}"
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed = time.perf_counter() - started
            logger.error(
                f"request_failed id={request_id} path={request.url.path} "
                f"elapsed={elapsed:.4f}s error={exc}",
                exc_info=True,
            )
            raise

        elapsed = time.perf_counter() - started
        logger.info(
            f"request_completed id={request_id} status={response.status_code} "
            f"elapsed={elapsed:.4f}s"
        )
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        return response


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Pydantic request validation failures answer 422"""
    errors = exc.errors()
    logger.warning(f"validation_error path={request.url.path} errors={len(errors)}")

    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in errors
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_body("VALIDATION_ERROR", "Request validation failed", details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"http_error status={exc.status_code} path={request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(f"HTTP_{exc.status_code}", exc.detail),
    )


async def dancymeals_exception_handler(request: Request, exc: DancyMealsError):
    """Map service errors onto their http_status with the standard envelope"""
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(f"{exc.code} status={exc.http_status} path={request.url.path}: {exc.message}")

    headers = None
    if isinstance(exc, TenantUnavailableError):
        headers = {"Retry-After": str(UNAVAILABLE_RETRY_AFTER)}

    return JSONResponse(
        status_code=exc.http_status,
        content=error_body(exc.code, exc.message, exc.details),
        headers=headers,
    )


async def checkout_redirect_handler(request: Request, exc: CheckoutRedirect):
    """Empty cart, missing login or skipped step: send the client elsewhere"""
    logger.info(
        f"checkout_redirect path={request.url.path} to={exc.redirect_to} code={exc.code}"
    )

    body = error_body(exc.code, exc.message)
    body["redirect"] = exc.redirect_to
    return JSONResponse(
        status_code=status.HTTP_303_SEE_OTHER,
        content=body,
        headers={"Location": exc.redirect_to},
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Anything unhandled becomes a 500 without leaking internals"""
    logger.exception(f"unhandled_error path={request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )
