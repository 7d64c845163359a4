"""
Restaurant Ledger - Error Handling

Every error leaves the API as

    {"detail": {"code": ..., "message": ..., "timestamp": ..., "field"?, "details"?}}

Request problems (bad dates, unknown formats) are 422, a missing
restaurant is 404 and a failed ledger read is 500. Unbalanced books are
not errors; they are reported as warnings on the statement.
"""

import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DataError, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("restaurant_ledger.errors")


class ErrorCode(str, Enum):
    """Stable values for `detail.code`."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    UNSUPPORTED_EXPORT_FORMAT = "UNSUPPORTED_EXPORT_FORMAT"
    NOT_FOUND = "NOT_FOUND"
    RESTAURANT_NOT_FOUND = "RESTAURANT_NOT_FOUND"
    DATABASE_ERROR = "DATABASE_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def error_body(
    code: ErrorCode,
    message: str,
    field: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "code": code.value,
        "message": message,
        "timestamp": _utc_timestamp(),
    }
    if field:
        body["field"] = field
    if details:
        body["details"] = details
    return body


def error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    field: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": error_body(code, message, field, details)},
    )


# ============================================================================
# Exceptions
# ============================================================================

class AppException(Exception):
    """An error with an HTTP status and an ErrorCode."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: Optional[int] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.field = field
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        return error_body(self.code, self.message, self.field, self.details)


class ValidationException(AppException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(code, message, field=field, details=details)


class InvalidDateRangeException(ValidationException):
    """Reporting window starts after it ends."""

    def __init__(self, date_from: Union[date, str], date_to: Union[date, str]):
        super().__init__(
            f"date_from ({date_from}) must not be after date_to ({date_to})",
            field="date_from",
            details={"date_from": str(date_from), "date_to": str(date_to)},
            code=ErrorCode.INVALID_DATE_RANGE,
        )


class UnsupportedExportFormatException(ValidationException):
    def __init__(self, export_format: str):
        super().__init__(
            f"Unsupported export format '{export_format}'; use csv or pdf",
            field="format",
            details={"provided": export_format, "allowed": ["csv", "pdf"]},
            code=ErrorCode.UNSUPPORTED_EXPORT_FORMAT,
        )


class NotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[Union[str, UUID]] = None,
        code: ErrorCode = ErrorCode.NOT_FOUND,
    ):
        suffix = f" '{resource_id}'" if resource_id else ""
        super().__init__(
            code,
            f"{resource_type}{suffix} not found",
            details={"resource_type": resource_type, "resource_id": str(resource_id) if resource_id else None},
        )


class RestaurantNotFoundException(NotFoundException):
    def __init__(self, restaurant_id: Union[str, UUID]):
        super().__init__("Restaurant", restaurant_id, code=ErrorCode.RESTAURANT_NOT_FOUND)


class DatabaseException(AppException):
    """A required ledger read failed."""

    def __init__(
        self,
        message: str = "A database error occurred",
        code: ErrorCode = ErrorCode.DATABASE_ERROR,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(code, message, original_error=original_error)


def validate_date_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    """Raise InvalidDateRangeException when date_from is after date_to."""
    if date_from is not None and date_to is not None and date_from > date_to:
        raise InvalidDateRangeException(date_from, date_to)


# ============================================================================
# Handlers
# ============================================================================

def _request_context(request: Request) -> Dict[str, str]:
    return {"path": request.url.path, "method": request.method}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    context = {"code": exc.code.value, **_request_context(request)}
    if exc.status_code >= 500:
        logger.error(f"{exc.code.value}: {exc.message}", extra=context, exc_info=exc.original_error)
    else:
        logger.warning(f"{exc.code.value}: {exc.message}", extra=context)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same shape."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        code = ErrorCode.NOT_FOUND
    elif exc.status_code < 500:
        code = ErrorCode.INVALID_INPUT
    else:
        code = ErrorCode.INTERNAL_ERROR
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    logger.warning(f"HTTP {exc.status_code}: {message}", extra=_request_context(request))
    return error_response(exc.status_code, code, message)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query or path parameters (bad UUID, date, enum value)."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Rejected request with {len(errors)} invalid parameter(s)", extra=_request_context(request))
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorCode.VALIDATION_ERROR,
        "Request validation failed",
        details={"errors": errors},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database errors raised outside the service's wrapped reads."""
    logger.error(f"{type(exc).__name__}: {exc}", extra=_request_context(request), exc_info=True)
    if isinstance(exc, OperationalError):
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, ErrorCode.CONNECTION_ERROR, "Ledger store is unavailable"
        )
    if isinstance(exc, DataError):
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, ErrorCode.INVALID_INPUT, "Invalid value for ledger query"
        )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.DATABASE_ERROR, "A database error occurred"
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.critical(f"Unhandled {type(exc).__name__}: {exc}", extra=_request_context(request), exc_info=True)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred"
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "ErrorCode",
    "AppException",
    "ValidationException",
    "InvalidDateRangeException",
    "UnsupportedExportFormatException",
    "NotFoundException",
    "RestaurantNotFoundException",
    "DatabaseException",
    "error_body",
    "error_response",
    "validate_date_range",
    "setup_exception_handlers",
]
