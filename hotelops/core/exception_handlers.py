"""
Exception handlers for converting domain exceptions to HTTP responses.

Every error body carries the same envelope: ``{"success": false, "message": ...}``
plus an ``error_type`` and optional ``details``/``code`` for programmatic callers.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from hotelops.core.exceptions import (
    AccessDeniedError,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    error_type: Optional[str] = None,
    code: Optional[str] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "message": message,
    }

    if error_type:
        content["error_type"] = error_type

    if code:
        content["code"] = code

    if details:
        content["details"] = jsonable_encoder(details)

    return JSONResponse(status_code=status_code, content=content)


async def entity_not_found_handler(
    request: Request, exc: EntityNotFoundError
) -> JSONResponse:
    """Handle EntityNotFoundError exceptions."""
    logger.info(f"Entity not found: {exc.entity_name} (id: {exc.entity_id})")

    return create_error_response(
        status_code=status.HTTP_404_NOT_FOUND,
        message=exc.message,
        details=exc.details,
        error_type="entity_not_found",
    )


async def access_denied_handler(
    request: Request, exc: AccessDeniedError
) -> JSONResponse:
    """Handle AccessDeniedError exceptions."""
    logger.warning(f"Access denied: {exc.message} for {request.url}")

    return create_error_response(
        status_code=status.HTTP_403_FORBIDDEN,
        message=exc.message,
        error_type="access_denied",
    )


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle ValidationError exceptions."""
    logger.warning(f"Validation error: {exc.message}")

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message=exc.message,
        details=exc.details,
        error_type="validation_error",
    )


async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Handle ConflictError exceptions."""
    logger.warning(f"Conflict error: {exc.message}")

    return create_error_response(
        status_code=status.HTTP_409_CONFLICT,
        message=exc.message,
        details=exc.details,
        error_type="conflict_error",
        code=exc.code,
    )


async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Handle generic DomainException exceptions."""
    logger.error(f"Unhandled domain exception: {exc.message}")

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An internal error occurred",
        error_type="domain_error",
    )


async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle SQLAlchemy IntegrityError exceptions."""
    logger.error(f"Database integrity error: {str(exc)}")

    lowered = str(exc).lower()
    if "exclusion constraint" in lowered:
        return create_error_response(
            status_code=status.HTTP_409_CONFLICT,
            message="Room not available in selected dates/times",
            error_type="conflict_error",
            code="ROOM_ALREADY_BOOKED",
        )

    error_message = "Database constraint violation"
    if "unique constraint" in lowered:
        error_message = "A record with this value already exists"
    elif "foreign key constraint" in lowered:
        error_message = "Referenced record does not exist"
    elif "not null constraint" in lowered:
        error_message = "Required field is missing"

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message=error_message,
        error_type="integrity_error",
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI request validation errors."""
    logger.warning(f"Request validation error: {exc.errors()}")

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Request validation failed",
        details={"validation_errors": exc.errors()},
        error_type="request_validation_error",
    )


# Exception handler mapping
EXCEPTION_HANDLERS = {
    EntityNotFoundError: entity_not_found_handler,
    AccessDeniedError: access_denied_handler,
    ValidationError: validation_error_handler,
    ConflictError: conflict_error_handler,
    DomainException: domain_exception_handler,
    IntegrityError: integrity_error_handler,
    RequestValidationError: request_validation_error_handler,
}
