"""Global error handlers for the dockerboot API."""

import uuid

import structlog
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..models.errors import (
    DockerBootException,
    ErrorDetail,
    ErrorResponse,
    ErrorType,
)

logger = structlog.get_logger(__name__)


def generate_request_id() -> str:
    """Generate a unique request ID for error tracking."""
    return uuid.uuid4().hex[:16]


async def dockerboot_exception_handler(
    request: Request, exc: DockerBootException
) -> JSONResponse:
    """Handle DockerBootException instances."""
    if not exc.request_id:
        exc.request_id = generate_request_id()

    log_data = {
        "error_type": exc.error_type.value,
        "status_code": exc.status_code,
        "message": exc.message,
        "request_id": exc.request_id,
        "path": request.url.path,
        "method": request.method,
    }
    if exc.__cause__ is not None:
        log_data["cause"] = str(exc.__cause__)

    if exc.status_code >= 500:
        logger.error("Server error occurred", **log_data)
    else:
        logger.warning("Client error occurred", **log_data)

    return JSONResponse(
        status_code=exc.status_code, content=exc.to_response().model_dump()
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException instances."""
    request_id = generate_request_id()

    if exc.status_code == 404:
        error_type = ErrorType.RESOURCE_NOT_FOUND
    elif exc.status_code in (401, 403):
        error_type = ErrorType.AUTHORIZATION
    elif exc.status_code in (400, 422):
        error_type = ErrorType.VALIDATION
    else:
        error_type = ErrorType.INTERNAL_SERVER

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=request_id,
        path=request.url.path,
    )

    response = ErrorResponse(
        error=str(exc.detail), error_type=error_type, request_id=request_id
    )
    return JSONResponse(status_code=exc.status_code, content=response.model_dump())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    request_id = generate_request_id()

    details = [
        ErrorDetail(
            field=".".join(str(loc) for loc in error.get("loc", [])),
            message=error.get("msg", "Invalid value"),
            code=error.get("type"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error occurred",
        request_id=request_id,
        path=request.url.path,
        errors=len(details),
    )

    response = ErrorResponse(
        error="Request validation failed",
        error_type=ErrorType.VALIDATION,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(status_code=422, content=response.model_dump())
