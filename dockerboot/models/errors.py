"""Error models and exception classes for dockerboot."""

import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Error type enumeration."""

    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    RESOURCE_CONFLICT = "resource_conflict"
    TIMEOUT = "timeout"
    INTERNAL_SERVER = "internal_server"
    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_SERVICE = "external_service"


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: Optional[str] = Field(None, description="Field name for validation errors")
    message: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(None, description="Machine-readable error code")


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    model_config = ConfigDict(use_enum_values=True)

    error: str = Field(..., description="Main error message")
    error_type: ErrorType = Field(..., description="Error category")
    details: Optional[List[ErrorDetail]] = Field(
        None, description="Additional error details"
    )
    request_id: Optional[str] = Field(
        None, description="Request identifier for tracking"
    )
    timestamp: float = Field(default_factory=time.time, description="Error timestamp")


# Custom Exception Classes


class DockerBootException(Exception):
    """Base exception for dockerboot."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INTERNAL_SERVER,
        status_code: int = 500,
        details: Optional[List[ErrorDetail]] = None,
        request_id: Optional[str] = None,
    ):
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.details = details or []
        self.request_id = request_id
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.message,
            error_type=self.error_type,
            details=self.details if self.details else None,
            request_id=self.request_id,
        )


_STATUS_BY_TYPE = {
    ErrorType.VALIDATION: 400,
    ErrorType.AUTHORIZATION: 403,
    ErrorType.RESOURCE_NOT_FOUND: 404,
    ErrorType.RESOURCE_CONFLICT: 409,
    ErrorType.TIMEOUT: 504,
    ErrorType.SERVICE_UNAVAILABLE: 503,
    ErrorType.EXTERNAL_SERVICE: 502,
}


class ContainerOperationError(DockerBootException):
    """A container engine operation failed for a managed container.

    The underlying exception is available as ``__cause__``.
    """

    def __init__(
        self,
        container_type: str,
        operation: str,
        error_type: ErrorType = ErrorType.INTERNAL_SERVER,
        message: Optional[str] = None,
        **kwargs,
    ):
        self.container_type = container_type
        self.operation = operation
        error_message = message or f"Cannot {operation} {container_type} container"
        super().__init__(
            message=error_message,
            error_type=error_type,
            status_code=_STATUS_BY_TYPE.get(error_type, 500),
            **kwargs,
        )


class ContainerNotFoundError(DockerBootException):
    """No manager is registered under the requested key."""

    def __init__(self, key: str, **kwargs):
        self.key = key
        super().__init__(
            message=f"No container manager registered for '{key}'",
            error_type=ErrorType.RESOURCE_NOT_FOUND,
            status_code=404,
            **kwargs,
        )


class ServiceUnavailableError(DockerBootException):
    """Service unavailable errors."""

    def __init__(self, service: str, message: Optional[str] = None, **kwargs):
        error_message = message or f"{service} service is currently unavailable"
        super().__init__(
            message=error_message,
            error_type=ErrorType.SERVICE_UNAVAILABLE,
            status_code=503,
            **kwargs,
        )
