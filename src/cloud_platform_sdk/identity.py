"""Identity providers that issue authentication tokens.

The executors only depend on the ``IdentityProvider`` protocols. The
Keystone providers implement them against the Identity v2.0 ``tokens``
resource, using Rackspace API-key credentials when an API key is set and
password credentials otherwise.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from .core.errors import ErrorFactory
from .core.http_executor import is_success
from .errors import AuthenticationFailedError
from .models import AuthToken, Credentials
from .telemetry import get_logger, trace_operation

if TYPE_CHECKING:
    from .config import CloudPlatformConfig


class IdentityProvider(Protocol):
    """Issues a new token for fixed credentials."""

    def authenticate(self) -> AuthToken:
        """Obtain a new token from the identity service."""
        ...


class AsyncIdentityProvider(Protocol):
    """Issues a new token for fixed credentials, asynchronously."""

    async def authenticate(self) -> AuthToken:
        """Obtain a new token from the identity service."""
        ...


def credentials_from_config(config: CloudPlatformConfig) -> Credentials:
    """Build identity credentials from SDK configuration."""
    return Credentials(
        username=config.username,
        api_key=config.api_key,
        password=config.password,
        tenant_name=config.tenant_name,
        tenant_id=config.tenant_id,
    )


def tokens_url(identity_url: str) -> str:
    """Resolve the v2.0 ``tokens`` endpoint from an identity base URL."""
    base = identity_url.rstrip("/")
    if not base.endswith("/v2.0"):
        base = f"{base}/v2.0"
    return f"{base}/tokens"


def build_token_request(credentials: Credentials) -> dict[str, Any]:
    """Build the Identity v2.0 authentication payload."""
    auth: dict[str, Any]
    if credentials.api_key is not None:
        auth = {
            "RAX-KSKEY:apiKeyCredentials": {
                "username": credentials.username,
                "apiKey": credentials.api_key.get_secret_value(),
            }
        }
    elif credentials.password is not None:
        auth = {
            "passwordCredentials": {
                "username": credentials.username,
                "password": credentials.password.get_secret_value(),
            }
        }
    else:
        msg = "credentials carry neither an API key nor a password"
        raise ValueError(msg)

    if credentials.tenant_name:
        auth["tenantName"] = credentials.tenant_name
    if credentials.tenant_id:
        auth["tenantId"] = credentials.tenant_id

    return {"auth": auth}


def parse_token_response(body: Any) -> AuthToken:
    """Extract the token from an Identity v2.0 ``access`` document.

    Raises:
        AuthenticationFailedError: If the document carries no token.
    """
    try:
        token = body["access"]["token"]
        token_id = token["id"]
    except (KeyError, TypeError) as e:
        msg = "Identity response did not contain a token"
        raise AuthenticationFailedError(msg) from e

    expires = token.get("expires")
    tenant = token.get("tenant") or {}
    return AuthToken(
        id=token_id,
        expires_at=datetime.fromisoformat(expires) if expires else None,
        tenant_id=tenant.get("id"),
    )


class KeystoneIdentityProvider:
    """Synchronous Keystone v2.0 identity provider."""

    def __init__(
        self,
        client: httpx.Client,
        identity_url: str,
        credentials: Credentials,
    ) -> None:
        self._client = client
        self._url = tokens_url(identity_url)
        self._credentials = credentials
        self._logger = get_logger()

    def authenticate(self) -> AuthToken:
        """Obtain a new token from the identity service.

        Raises:
            TransportError: On network failure.
            AuthenticationFailedError: If the credentials are rejected.
            RequestFailedError: On any other non-2xx status.
        """
        with trace_operation("authenticate", attributes={"identity.url": self._url}):
            try:
                response = self._client.post(
                    self._url,
                    json=build_token_request(self._credentials),
                )
            except httpx.HTTPError as e:
                raise ErrorFactory.from_exception(e) from e

            if not is_success(response.status_code):
                raise ErrorFactory.from_http_response(response)

            token = parse_token_response(response.json())
            self._logger.info(
                "Authenticated",
                username=self._credentials.username,
                expires_at=str(token.expires_at),
            )
            return token


class AsyncKeystoneIdentityProvider:
    """Asynchronous Keystone v2.0 identity provider."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        identity_url: str,
        credentials: Credentials,
    ) -> None:
        self._client = client
        self._url = tokens_url(identity_url)
        self._credentials = credentials
        self._logger = get_logger()

    async def authenticate(self) -> AuthToken:
        """Obtain a new token from the identity service."""
        with trace_operation("authenticate", attributes={"identity.url": self._url}):
            try:
                response = await self._client.post(
                    self._url,
                    json=build_token_request(self._credentials),
                )
            except httpx.HTTPError as e:
                raise ErrorFactory.from_exception(e) from e

            if not is_success(response.status_code):
                raise ErrorFactory.from_http_response(response)

            token = parse_token_response(response.json())
            self._logger.info(
                "Authenticated",
                username=self._credentials.username,
                expires_at=str(token.expires_at),
            )
            return token
