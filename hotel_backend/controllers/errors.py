"""Translation of domain errors into HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hotel_backend.domain.errors import BookingApiError, StoreError
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)

GENERIC_STORE_MESSAGE = "The booking store is temporarily unavailable"


def to_http_exception(exc: BookingApiError) -> HTTPException:
    """Map a taxonomy error to its HTTP status; store details stay in the log."""
    if isinstance(exc, StoreError):
        logger.error("Store failure | retryable=%s | detail=%s", exc.retryable, exc)
        headers = {"Retry-After": "1"} if exc.retryable else None
        return HTTPException(status_code=exc.status_code, detail=GENERIC_STORE_MESSAGE, headers=headers)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return HTTPException(status_code=exc.status_code, detail=str(exc), headers=headers)


def internal_error(operation: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {operation}",
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{"success": false, "message": ...}``."""

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": _format_validation_errors(exc)},
        )
