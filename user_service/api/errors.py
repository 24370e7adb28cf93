"""
Exception-to-HTTP translation.

Domain errors map to:
- NotFoundError → 404 NOT_FOUND
- ConflictError → 409 BUSINESS_RULE_VIOLATION
- ValidationError → 400 INVALID_INPUT
Request validation errors map to 422, anything unexpected to 500.
"""
from datetime import datetime, timezone
from typing import Any, List, Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from user_service.domain.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class FieldError(BaseModel):
    field: str
    rejected_value: Any = None
    message: str


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint"""
    timestamp: datetime
    status: int
    error: str
    message: str
    details: Optional[str] = None
    path: str
    validation_errors: Optional[List[FieldError]] = None


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[str] = None,
    validation_errors: Optional[List[FieldError]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        timestamp=datetime.now(timezone.utc),
        status=status_code,
        error=error,
        message=message,
        details=details,
        path=request.url.path,
        validation_errors=validation_errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads, bad enum values, non-UUID path IDs"""
    errors = exc.errors()
    logger.warning(f"Validation error for {request.method} {request.url.path}: {len(errors)} error(s)")

    field_errors = [
        FieldError(
            field=".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            rejected_value=jsonable_encoder(err.get("input")),
            message=err.get("msg", ""),
        )
        for err in errors
    ]

    enum_errors = [err for err in errors if err.get("type") == "enum"]
    if enum_errors:
        field_name = str(enum_errors[0].get("loc", ("value",))[-1])
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "INVALID_FORMAT",
            f"Invalid {field_name} value",
            enum_errors[0].get("msg"),
            field_errors,
        )

    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Invalid input data",
        "One or more fields have validation errors",
        field_errors,
    )


async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning(f"Resource not found: {exc.message}")
    return _error_response(
        request, status.HTTP_404_NOT_FOUND, "NOT_FOUND", "Resource not found", exc.message
    )


async def conflict_handler(request: Request, exc: ConflictError):
    logger.warning(f"Business rule violation: {exc.message}")
    return _error_response(
        request, status.HTTP_409_CONFLICT, "BUSINESS_RULE_VIOLATION", "Business rule violation", exc.message
    )


async def domain_validation_handler(request: Request, exc: ValidationError):
    logger.warning(f"Domain validation failed on {exc.field}: {exc.message}")
    field_errors = [FieldError(field=exc.field, message=exc.message)] if exc.field else None
    return _error_response(
        request, status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", "Invalid input", exc.message, field_errors
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        "Please contact support if the problem persists",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ConflictError, conflict_handler)
    app.add_exception_handler(ValidationError, domain_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
