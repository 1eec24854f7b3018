"""Asynchronous Cloud Platform client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from .compute import AsyncComputeService
from .core.errors import ErrorFactory
from .core.http_executor import AsyncAuthenticatedExecutor
from .core.poller import AsyncStatusPoller
from .core.token_cache import AsyncTokenCache
from .http import create_async_http_client
from .identity import AsyncKeystoneIdentityProvider, credentials_from_config

if TYPE_CHECKING:
    import httpx

    from .config import CloudPlatformConfig
    from .identity import AsyncIdentityProvider


class AsyncCloudPlatformClient:
    """Asynchronous Cloud Platform client."""

    def __init__(
        self,
        config: CloudPlatformConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        identity: AsyncIdentityProvider | None = None,
        token_cache: AsyncTokenCache | None = None,
    ) -> None:
        """Initialize async client.

        Args:
            config: SDK configuration.
            http_client: Optional transport (one is created from config if omitted).
            identity: Optional identity provider (Keystone v2.0 by default).
            token_cache: Optional token cache, e.g. one shared between clients.
        """
        self.config = config
        self._owns_http = http_client is None
        self._http = http_client or create_async_http_client(config)
        self._identity = identity or AsyncKeystoneIdentityProvider(
            self._http,
            config.identity_url_str,
            credentials_from_config(config),
        )
        self.executor = AsyncAuthenticatedExecutor(
            self._http,
            self._identity,
            token_cache or AsyncTokenCache(),
        )
        self.poller = AsyncStatusPoller(config.wait)
        self._compute: AsyncComputeService | None = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    @property
    def compute(self) -> AsyncComputeService:
        """Compute service client.

        Raises:
            InvalidConfigError: If no compute endpoint is configured.
        """
        if self._compute is None:
            endpoint = self.config.compute_url_str
            if endpoint is None:
                raise ErrorFactory.config_error(
                    "compute_url is required for the compute service",
                    field="compute_url",
                )
            self._compute = AsyncComputeService(
                self.executor,
                self.poller,
                endpoint,
                microversion=self.config.microversion,
            )
        return self._compute
