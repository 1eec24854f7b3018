"""Synchronous Cloud Platform client.

Wires the HTTP transport, identity provider, token cache, authenticated
executor, status poller and service clients together from one config.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from .compute import ComputeService
from .core.errors import ErrorFactory
from .core.http_executor import SyncAuthenticatedExecutor
from .core.poller import StatusPoller
from .core.token_cache import TokenCache
from .http import create_http_client
from .identity import KeystoneIdentityProvider, credentials_from_config

if TYPE_CHECKING:
    import httpx

    from .config import CloudPlatformConfig
    from .identity import IdentityProvider


class CloudPlatformClient:
    """Synchronous Cloud Platform client."""

    def __init__(
        self,
        config: CloudPlatformConfig,
        *,
        http_client: httpx.Client | None = None,
        identity: IdentityProvider | None = None,
        token_cache: TokenCache | None = None,
    ) -> None:
        """Initialize client.

        Args:
            config: SDK configuration.
            http_client: Optional transport (one is created from config if omitted).
            identity: Optional identity provider (Keystone v2.0 by default).
            token_cache: Optional token cache, e.g. one shared between clients.
        """
        self.config = config
        self._owns_http = http_client is None
        self._http = http_client or create_http_client(config)
        self._identity = identity or KeystoneIdentityProvider(
            self._http,
            config.identity_url_str,
            credentials_from_config(config),
        )
        self.executor = SyncAuthenticatedExecutor(
            self._http,
            self._identity,
            token_cache or TokenCache(),
        )
        self.poller = StatusPoller(config.wait)
        self._compute: ComputeService | None = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http:
            self._http.close()

    @property
    def compute(self) -> ComputeService:
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
            self._compute = ComputeService(
                self.executor,
                self.poller,
                endpoint,
                microversion=self.config.microversion,
            )
        return self._compute
