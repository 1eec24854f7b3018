"""Centralized error factory for Cloud Platform SDK.

Provides consistent error creation and transformation across all SDK components.
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx

from ..errors import (
    AuthenticationFailedError,
    CloudPlatformError,
    ErrorCode,
    InvalidConfigError,
    RequestFailedError,
    ResourceNotFoundError,
    TransportError,
)


class ErrorFactory:
    """Centralized error creation with consistent structure.

    All errors created through this factory include:
    - Standardized error codes
    - Optional correlation IDs for tracing
    - The response body, verbatim, for failed requests
    """

    @staticmethod
    def generate_correlation_id() -> str:
        """Generate a unique correlation ID."""
        return str(uuid.uuid4())

    @staticmethod
    def extract_details(response: httpx.Response) -> dict[str, Any]:
        """Pull error details out of an OpenStack-style JSON fault body.

        Fault bodies wrap the message in a single named object, e.g.
        ``{"itemNotFound": {"message": "...", "code": 404}}``.
        """
        details: dict[str, Any] = {}
        try:
            body = response.json()
        except ValueError:
            return details

        if not isinstance(body, dict):
            return details

        if "message" in body or "error" in body:
            fault: Any = body
        elif len(body) == 1:
            details["fault"] = next(iter(body))
            fault = next(iter(body.values()))
        else:
            return details

        if isinstance(fault, dict):
            message = fault.get("message") or fault.get("error")
            if message is not None:
                details["message"] = message
        return details

    @staticmethod
    def from_http_response(
        response: httpx.Response,
        *,
        correlation_id: str | None = None,
    ) -> CloudPlatformError:
        """Create SDK error from a non-2xx HTTP response.

        Args:
            response: HTTP response object.
            correlation_id: Optional correlation ID for tracing.

        Returns:
            ResourceNotFoundError for 404, AuthenticationFailedError for 401,
            RequestFailedError otherwise.
        """
        status = response.status_code
        correlation_id = correlation_id or ErrorFactory.generate_correlation_id()
        body = response.text
        details = ErrorFactory.extract_details(response)

        if status == 401:
            return AuthenticationFailedError(
                details.get("message", "Authentication failed"),
                body=body,
                correlation_id=correlation_id,
            )

        if status == 404:
            return ResourceNotFoundError(
                details.get("message", "Resource not found"),
                body=body,
                correlation_id=correlation_id,
                details=details,
            )

        return RequestFailedError(
            details.get("message", f"Request failed with status {status}"),
            status_code=status,
            body=body,
            correlation_id=correlation_id,
            details=details,
        )

    @staticmethod
    def from_exception(
        exc: httpx.HTTPError,
        *,
        correlation_id: str | None = None,
    ) -> TransportError:
        """Create SDK error from an httpx transport exception.

        Args:
            exc: Exception raised by the httpx client.
            correlation_id: Optional correlation ID for tracing.

        Returns:
            TransportError with a timeout, connection or generic code.
        """
        correlation_id = correlation_id or ErrorFactory.generate_correlation_id()

        if isinstance(exc, httpx.TimeoutException):
            return TransportError(
                f"Request timed out: {exc}",
                ErrorCode.TRANSPORT_TIMEOUT,
                correlation_id=correlation_id,
                cause=exc,
            )

        if isinstance(exc, httpx.ConnectError):
            return TransportError(
                f"Connection failed: {exc}",
                ErrorCode.CONNECTION_ERROR,
                correlation_id=correlation_id,
                cause=exc,
            )

        return TransportError(
            f"HTTP error: {exc}",
            correlation_id=correlation_id,
            cause=exc,
        )

    @staticmethod
    def config_error(
        message: str,
        *,
        field: str | None = None,
    ) -> InvalidConfigError:
        """Create configuration error with field details."""
        return InvalidConfigError(
            message,
            field=field,
        )
