"""Core components for Cloud Platform SDK.

The authenticated request pipeline and the status pollers, shared by
every service client.
"""

from __future__ import annotations

from .errors import ErrorFactory
from .http_executor import AsyncAuthenticatedExecutor, SyncAuthenticatedExecutor
from .poller import AsyncStatusPoller, Deadline, StatusPoller
from .token_cache import AsyncTokenCache, TokenCache

__all__ = [
    "ErrorFactory",
    "SyncAuthenticatedExecutor",
    "AsyncAuthenticatedExecutor",
    "StatusPoller",
    "AsyncStatusPoller",
    "Deadline",
    "TokenCache",
    "AsyncTokenCache",
]
