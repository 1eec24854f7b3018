"""Cloud Platform Python SDK."""

from .async_client import AsyncCloudPlatformClient
from .client import CloudPlatformClient
from .config import CloudPlatformConfig, TelemetryConfig, WaitConfig
from .core import (
    AsyncAuthenticatedExecutor,
    AsyncStatusPoller,
    AsyncTokenCache,
    StatusPoller,
    SyncAuthenticatedExecutor,
    TokenCache,
)
from .errors import (
    AuthenticationFailedError,
    CloudPlatformError,
    InvalidConfigError,
    OperationCancelledError,
    OperationFailedError,
    RequestFailedError,
    ResourceNotFoundError,
    TransportError,
    WaitTimeoutError,
)
from .models import ApiRequest, AuthToken, Credentials, Image, Page, Server
from .status import ImageStatus, ResourceStatus, ServerStatus, SnapshotStatus, VolumeStatus

__all__ = [
    "CloudPlatformClient",
    "AsyncCloudPlatformClient",
    "CloudPlatformConfig",
    "TelemetryConfig",
    "WaitConfig",
    "SyncAuthenticatedExecutor",
    "AsyncAuthenticatedExecutor",
    "StatusPoller",
    "AsyncStatusPoller",
    "TokenCache",
    "AsyncTokenCache",
    "CloudPlatformError",
    "TransportError",
    "RequestFailedError",
    "ResourceNotFoundError",
    "AuthenticationFailedError",
    "OperationFailedError",
    "WaitTimeoutError",
    "OperationCancelledError",
    "InvalidConfigError",
    "ApiRequest",
    "AuthToken",
    "Credentials",
    "Image",
    "Page",
    "Server",
    "ResourceStatus",
    "ServerStatus",
    "ImageStatus",
    "VolumeStatus",
    "SnapshotStatus",
]

__version__ = "0.1.0"
