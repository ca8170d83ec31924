# storefront/core/error_handlers.py

import logging
import traceback
import uuid

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .exceptions import StorefrontError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_CODE_MAP = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.INVALID_EMAIL: 400,
    ErrorCode.MISSING_SESSION_ID: 400,
    ErrorCode.TOTAL_MISMATCH: 400,
    ErrorCode.EMAIL_NOT_CONFIGURED: 500,
    ErrorCode.EMAIL_SERVICE_UNAVAILABLE: 500,
    ErrorCode.EMAIL_AUTH_FAILED: 500,
    ErrorCode.EMAIL_CONNECTION_FAILED: 500,
    ErrorCode.EMAIL_SEND_FAILED: 500,
    ErrorCode.PAYMENT_SERVICE_UNAVAILABLE: 500,
    ErrorCode.PAYMENT_REQUEST_REJECTED: 500,
    ErrorCode.PAYMENT_FAILED: 500,
    ErrorCode.INTERNAL_SERVER_ERROR: 500,
}


def setup_error_handlers(app: FastAPI):
    """Set up global error handlers for the FastAPI application."""

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        """Handle application errors raised by handlers and adapters."""
        status_code = STATUS_CODE_MAP.get(exc.code, 500)
        log = logger.warning if status_code < 500 else logger.error
        log(
            f"Storefront Error: {exc.code.value}",
            extra={
                "error_code": exc.code.value,
                "user_message": exc.user_message,
                "technical_details": exc.technical_details,
                "context": exc.context,
                "request_url": str(request.url),
                "request_method": request.method,
                "client_ip": request.client.host if request.client else None,
            },
        )
        return JSONResponse(status_code=status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed payloads are client errors (400), with per-field details."""
        errors = []
        for error in exc.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning(
            "Validation error",
            extra={
                "validation_errors": errors,
                "request_url": str(request.url),
                "request_method": request.method,
            },
        )

        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request payload",
                "code": ErrorCode.INVALID_REQUEST.value,
                "details": errors,
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle standard HTTP exceptions with consistent format."""
        logger.warning(
            f"HTTP Exception: {exc.status_code}",
            extra={
                "status_code": exc.status_code,
                "detail": exc.detail,
                "request_url": str(request.url),
                "request_method": request.method,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "code": f"HTTP_{exc.status_code}",
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions; internals never reach the caller."""
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            extra={
                "exception_type": type(exc).__name__,
                "request_url": str(request.url),
                "request_method": request.method,
                "traceback": traceback.format_exc(),
            },
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "An internal server error occurred. Please try again later.",
                "code": ErrorCode.INTERNAL_SERVER_ERROR.value,
            },
        )


async def add_request_id_middleware(request: Request, call_next):
    """Add request ID for better error tracking."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response
