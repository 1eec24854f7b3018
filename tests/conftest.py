"""
Shared test fixtures for Cloud Platform SDK tests.

Provides fake identity providers, a queue-backed mock HTTP transport
and configuration fixtures.
"""

from __future__ import annotations

from collections import deque
from typing import Any

import httpx
import pytest

from cloud_platform_sdk.config import (
    CloudPlatformConfig,
    TelemetryConfig,
    WaitConfig,
)
from cloud_platform_sdk.models import AuthToken


class CountingIdentity:
    """Identity provider issuing token-1, token-2, ... and counting calls."""

    def __init__(self) -> None:
        self.calls = 0

    def authenticate(self) -> AuthToken:
        self.calls += 1
        return AuthToken(id=f"token-{self.calls}")


class AsyncCountingIdentity:
    """Async identity provider issuing token-1, token-2, ..."""

    def __init__(self) -> None:
        self.calls = 0

    async def authenticate(self) -> AuthToken:
        self.calls += 1
        return AuthToken(id=f"token-{self.calls}")


class ResponseQueue:
    """Mock transport handler answering requests from a FIFO queue."""

    def __init__(self) -> None:
        self._queue: deque[httpx.Response | Exception] = deque()
        self.requests: list[httpx.Request] = []

    def add(
        self,
        status_code: int = 200,
        *,
        json: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> ResponseQueue:
        if json is not None:
            response = httpx.Response(status_code, json=json, headers=headers)
        else:
            response = httpx.Response(status_code, text=text or "", headers=headers)
        self._queue.append(response)
        return self

    def fail(self, exc: Exception) -> ResponseQueue:
        self._queue.append(exc)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self._queue.popleft()
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def tokens_sent(self) -> list[str | None]:
        return [r.headers.get("X-Auth-Token") for r in self.requests]


@pytest.fixture
def identity() -> CountingIdentity:
    """Provide a counting identity provider."""
    return CountingIdentity()


@pytest.fixture
def async_identity() -> AsyncCountingIdentity:
    """Provide a counting async identity provider."""
    return AsyncCountingIdentity()


@pytest.fixture
def responses() -> ResponseQueue:
    """Provide a queue of canned HTTP responses."""
    return ResponseQueue()


@pytest.fixture
def http_client(responses: ResponseQueue) -> httpx.Client:
    """Provide a sync HTTP client backed by the response queue."""
    with httpx.Client(transport=httpx.MockTransport(responses)) as client:
        yield client


@pytest.fixture
def async_http_client(responses: ResponseQueue) -> httpx.AsyncClient:
    """Provide an async HTTP client backed by the response queue."""
    return httpx.AsyncClient(transport=httpx.MockTransport(responses))


@pytest.fixture
def telemetry_config() -> TelemetryConfig:
    """Provide telemetry configuration for testing."""
    return TelemetryConfig(
        enabled=False,
        service_name="test-sdk",
        trace_requests=False,
    )


@pytest.fixture
def wait_config() -> WaitConfig:
    """Provide fast polling configuration for testing."""
    return WaitConfig(refresh_delay=0.01, timeout=5.0)


@pytest.fixture
def base_config(
    telemetry_config: TelemetryConfig,
    wait_config: WaitConfig,
) -> CloudPlatformConfig:
    """Provide a basic SDK configuration for testing."""
    return CloudPlatformConfig(
        identity_url="https://identity.example.com/v2.0",
        username="demo",
        api_key="demo-api-key",
        compute_url="https://compute.example.com/v2.1/tenant-1",
        telemetry=telemetry_config,
        wait=wait_config,
    )


@pytest.fixture
def sample_access() -> dict[str, Any]:
    """Provide a sample Identity v2.0 access document."""
    return {
        "access": {
            "token": {
                "id": "aaaaa-bbbbb-ccccc",
                "expires": "2026-10-18T12:00:00.000-05:00",
                "tenant": {"id": "tenant-1", "name": "tenant-1"},
            },
            "user": {"id": "123", "name": "demo"},
        }
    }
