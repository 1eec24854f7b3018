"""HTTP client utilities for Cloud Platform SDK."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlparse

import httpx

if TYPE_CHECKING:
    from .config import CloudPlatformConfig

USER_AGENT = "cloud-platform-sdk/0.1.0 Python"


def _timeout(config: CloudPlatformConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.connect_timeout,
        read=config.timeout,
        write=config.timeout,
        pool=config.timeout,
    )


def create_http_client(config: CloudPlatformConfig) -> httpx.Client:
    """Create configured sync HTTP client.

    Args:
        config: SDK configuration.

    Returns:
        Configured httpx.Client.
    """
    return httpx.Client(
        timeout=_timeout(config),
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        },
        follow_redirects=False,
    )


def create_async_http_client(config: CloudPlatformConfig) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Args:
        config: SDK configuration.

    Returns:
        Configured httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        timeout=_timeout(config),
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        },
        follow_redirects=False,
    )


def identifier_from_location(response: httpx.Response) -> str:
    """Take a resource id off the end of the ``Location`` header.

    e.g. ``http://host:9292/images/baaab9b9-...`` gives ``baaab9b9-...``.

    Raises:
        ValueError: If the header is missing or has no path segment.
    """
    location = response.headers.get("Location")
    if not location:
        msg = "Response has no Location header"
        raise ValueError(msg)
    segment = urlparse(location).path.rstrip("/").rsplit("/", 1)[-1]
    if not segment:
        msg = f"Location header has no identifier: {location}"
        raise ValueError(msg)
    return segment
