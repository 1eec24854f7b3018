"""Error classes for Cloud Platform SDK.

Structured error hierarchy with error codes and correlation IDs. Every
error raised by the request pipeline or the status poller is a
``CloudPlatformError`` carrying enough context (status code, resource id,
elapsed time) for the caller to decide whether to retry, abort or report.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for Cloud Platform SDK."""

    # Authentication errors (1xxx)
    AUTHENTICATION_FAILED = "AUTH_1001"
    INVALID_CREDENTIALS = "AUTH_1002"

    # Request errors (2xxx)
    REQUEST_FAILED = "REQ_2001"
    RESOURCE_NOT_FOUND = "REQ_2002"

    # Transport errors (3xxx)
    TRANSPORT_ERROR = "NET_3001"
    CONNECTION_ERROR = "NET_3002"
    TRANSPORT_TIMEOUT = "NET_3003"

    # Operation errors (4xxx)
    OPERATION_FAILED = "OP_4001"
    WAIT_TIMEOUT = "OP_4002"
    OPERATION_CANCELLED = "OP_4003"

    # Configuration errors (5xxx)
    INVALID_CONFIG = "CFG_5001"


class CloudPlatformError(Exception):
    """Base error for Cloud Platform SDK with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        *,
        status_code: int | None = None,
        correlation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = str(code)
        self.status_code = status_code
        self.correlation_id = correlation_id
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "correlation_id": self.correlation_id,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class TransportError(CloudPlatformError):
    """Network or connection failure; the request never produced a response."""

    def __init__(
        self,
        message: str = "Transport failure",
        code: ErrorCode = ErrorCode.TRANSPORT_ERROR,
        *,
        correlation_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            correlation_id=correlation_id,
            details={"cause": str(cause)} if cause else None,
        )
        self.__cause__ = cause


class RequestFailedError(CloudPlatformError):
    """Service answered with a non-2xx status other than 401."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str = "",
        code: ErrorCode = ErrorCode.REQUEST_FAILED,
        correlation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            status_code=status_code,
            correlation_id=correlation_id,
            details=details,
        )
        self.body = body


class ResourceNotFoundError(RequestFailedError):
    """Service answered 404 Not Found."""

    def __init__(
        self,
        message: str = "Resource not found",
        *,
        body: str = "",
        correlation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=404,
            body=body,
            code=ErrorCode.RESOURCE_NOT_FOUND,
            correlation_id=correlation_id,
            details=details,
        )


class AuthenticationFailedError(CloudPlatformError):
    """Request was still rejected with 401 after one token refresh."""

    def __init__(
        self,
        message: str = "Authentication failed after token refresh",
        *,
        body: str = "",
        correlation_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.AUTHENTICATION_FAILED,
            status_code=401,
            correlation_id=correlation_id,
        )
        self.body = body


class OperationFailedError(CloudPlatformError):
    """Polled resource reached its designated error state."""

    def __init__(
        self,
        resource_id: str,
        *,
        status: str | None = None,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message or f"Operation on resource {resource_id} failed",
            ErrorCode.OPERATION_FAILED,
            details={"resource_id": resource_id, "status": status},
        )
        self.resource_id = resource_id
        self.status = status


class WaitTimeoutError(CloudPlatformError):
    """Polling deadline elapsed before the resource reached its target."""

    def __init__(
        self,
        resource_id: str,
        elapsed: float,
        *,
        timeout: float | None = None,
    ) -> None:
        super().__init__(
            f"The requested timeout of {timeout} seconds has been reached "
            f"while waiting for resource {resource_id}",
            ErrorCode.WAIT_TIMEOUT,
            details={"resource_id": resource_id, "elapsed": elapsed, "timeout": timeout},
        )
        self.resource_id = resource_id
        self.elapsed = elapsed
        self.timeout = timeout


class OperationCancelledError(CloudPlatformError):
    """Caller cancelled the wait through its cancellation event."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(
            f"Waiting for resource {resource_id} was cancelled",
            ErrorCode.OPERATION_CANCELLED,
            details={"resource_id": resource_id},
        )
        self.resource_id = resource_id


class InvalidConfigError(CloudPlatformError):
    """Invalid SDK configuration."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_CONFIG,
            details={"field": field} if field else None,
        )
